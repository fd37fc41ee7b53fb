"""Factory for creating transport senders"""

import logging
from typing import Any, Dict

from herald.infrastructure.transport.base import TransportSender
from herald.infrastructure.transport.http import HttpTransportSender
from herald.infrastructure.transport.mock import MockTransportSender

logger = logging.getLogger(__name__)


class TransportSenderFactory:
    """Factory for creating transport sender instances"""

    SENDERS = {
        "mock": MockTransportSender,
        "http": HttpTransportSender,
    }

    @classmethod
    def create(cls, kind: str, config: Dict[str, Any] = None) -> TransportSender:
        """Create transport sender instance

        Args:
            kind: Type of sender (mock, http)
            config: Sender configuration

        Returns:
            TransportSender instance

        Raises:
            ValueError: If sender type is not supported
        """
        if config is None:
            config = {}

        kind_lower = kind.lower()

        if kind_lower not in cls.SENDERS:
            available = ", ".join(cls.SENDERS.keys())
            raise ValueError(f"Unknown transport: {kind}. Available transports: {available}")

        sender_class = cls.SENDERS[kind_lower]
        logger.info(f"Creating {kind_lower} transport")
        return sender_class(config)
