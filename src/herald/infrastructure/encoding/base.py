"""Base message encoder interface"""

from abc import ABC, abstractmethod
from typing import Optional

from herald.domain.models.encoded_message import EncodedMessage
from herald.domain.models.event import EventData


class MessageEncoder(ABC):
    """Abstract base class for message encoders"""

    #: Tag identifying the representation of the messages this encoder produces
    representation: str = ""

    @abstractmethod
    def encode(self, event: EventData, partition_key: Optional[str] = None) -> EncodedMessage:
        """Encode a single event

        Args:
            event: Event to encode
            partition_key: Partition key of the batch the event is destined for

        Returns:
            Encoded message owning its buffer
        """
        pass

    @abstractmethod
    def encode_empty_envelope(self, partition_key: Optional[str] = None) -> EncodedMessage:
        """Encode an envelope holding no events, to measure batch framing overhead"""
        pass
