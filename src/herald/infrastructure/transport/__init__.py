"""Transport senders"""

from herald.infrastructure.transport.base import TransportSender
from herald.infrastructure.transport.factory import TransportSenderFactory
from herald.infrastructure.transport.http import HttpTransportSender
from herald.infrastructure.transport.mock import MockTransportSender

__all__ = [
    "TransportSender",
    "TransportSenderFactory",
    "HttpTransportSender",
    "MockTransportSender",
]
