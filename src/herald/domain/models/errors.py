"""Error types raised and recognized by the publishing client"""

from enum import Enum
from typing import Optional


class TransientKind(str, Enum):
    """System-level failure kinds that are always worth retrying"""

    TIMEOUT = "timeout"
    CONNECTION = "connection"
    CANCELLED = "cancelled"


class PublishError(Exception):
    """Error raised while publishing, with an explicit transience flag"""

    def __init__(self, message: str = "", is_transient: bool = False):
        super().__init__(message)
        self.is_transient = is_transient


class MessageTooLargeError(PublishError):
    """An event does not fit even into an empty batch"""

    def __init__(self, message: str = ""):
        super().__init__(message, is_transient=False)


class OperationCancelledError(Exception):
    """Cancellation signal, optionally wrapping the failure that caused it"""

    def __init__(self, message: str = "Operation was cancelled", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class BatchDisposedError(RuntimeError):
    """A batch was used after it had been disposed"""


class UnsupportedRepresentationError(TypeError):
    """A batch was asked for messages in a representation it does not hold"""
