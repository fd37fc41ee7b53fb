"""EventData model - a single message to publish"""

from dataclasses import dataclass, field
from typing import Any, Dict, Union


@dataclass
class EventData:
    """Represents one event as supplied by the caller"""

    body: bytes  # Opaque payload
    properties: Dict[str, Any] = field(default_factory=dict)  # Application properties

    def __post_init__(self):
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        if not isinstance(self.body, (bytes, bytearray)):
            raise TypeError("Event body must be bytes or str")

    @classmethod
    def from_text(cls, text: Union[str, bytes], **properties: Any) -> "EventData":
        """Create an event from text, storing keyword arguments as properties"""
        return cls(body=text, properties=dict(properties))
