"""EncodedMessage model - transport-ready form of one event"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class EncodedMessage:
    """Encoded bytes of one event (or of an empty batch envelope).

    The handle owns its buffer until ``release()`` is called. Releasing drops
    the buffer but keeps the measured size so accounting stays readable.
    """

    body: bytes
    partition_key: Optional[str] = None
    _size: int = field(init=False, repr=False)
    _released: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        self._size = len(self.body)

    @property
    def size_in_bytes(self) -> int:
        """Encoded size of the message"""
        return self._size

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Release the encoded buffer (idempotent)"""
        if self._released:
            return
        self._released = True
        self.body = b""
