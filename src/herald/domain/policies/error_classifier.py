"""Classification of failures into retriable and fatal.

Classification inspects the error structurally instead of walking an open
exception hierarchy:

1. Domain errors (``PublishError``) carry an explicit ``is_transient`` flag.
2. Wrappers (``OperationCancelledError`` with a cause, exception groups) are
   classified by their first nested cause.
3. A closed set of system-level kinds (``TransientKind``) is retriable,
   including plain ``OSError``s that carry a network errno.
4. Anything else is fatal.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import errno
import logging
import socket
from enum import Enum
from typing import Optional

from herald.domain.models.errors import OperationCancelledError, PublishError, TransientKind

logger = logging.getLogger(__name__)


class ErrorClassification(str, Enum):
    """Outcome of classifying a failure"""

    RETRIABLE = "retriable"
    FATAL = "fatal"


# Order matters: the first matching entry decides the kind.
_SYSTEM_TRANSIENT_KINDS = (
    (TimeoutError, TransientKind.TIMEOUT),
    (ConnectionError, TransientKind.CONNECTION),
    (socket.gaierror, TransientKind.CONNECTION),
    (socket.herror, TransientKind.CONNECTION),
    (OperationCancelledError, TransientKind.CANCELLED),
    (asyncio.CancelledError, TransientKind.CANCELLED),
    (concurrent.futures.CancelledError, TransientKind.CANCELLED),
)

# Socket-level faults raised as plain OSError
_NETWORK_ERRNOS = frozenset(
    getattr(errno, name)
    for name in (
        "ENETDOWN",
        "ENETUNREACH",
        "ENETRESET",
        "EHOSTDOWN",
        "EHOSTUNREACH",
        "ECONNABORTED",
        "ECONNRESET",
        "ECONNREFUSED",
        "ETIMEDOUT",
        "EPIPE",
        "ENOTCONN",
        "ESHUTDOWN",
    )
    if hasattr(errno, name)
)


def transient_kind(error: BaseException) -> Optional[TransientKind]:
    """Return the system-level transient kind of an error, if it has one"""
    for error_type, kind in _SYSTEM_TRANSIENT_KINDS:
        if isinstance(error, error_type):
            return kind
    if isinstance(error, OSError) and error.errno in _NETWORK_ERRNOS:
        return TransientKind.CONNECTION
    return None


def nested_cause(error: BaseException) -> Optional[BaseException]:
    """Return the primary nested cause of a wrapper error

    Args:
        error: Error to inspect

    Returns:
        The wrapped cause for cancellation wrappers, the first member of an
        exception group, or None when the error wraps nothing
    """
    if isinstance(error, OperationCancelledError):
        return error.cause
    if isinstance(error, BaseExceptionGroup):
        return error.exceptions[0] if error.exceptions else None
    return None


def classify_error(error: Optional[BaseException]) -> ErrorClassification:
    """Classify an error as retriable or fatal

    Args:
        error: The failure of the last attempt (None is treated as fatal)

    Returns:
        ErrorClassification for the error
    """
    if error is None:
        return ErrorClassification.FATAL

    if isinstance(error, PublishError):
        return ErrorClassification.RETRIABLE if error.is_transient else ErrorClassification.FATAL

    cause = nested_cause(error)
    if cause is not None:
        return classify_error(cause)

    if transient_kind(error) is not None:
        return ErrorClassification.RETRIABLE

    logger.debug(f"Unrecognized error kind {type(error).__name__}, treating as fatal")
    return ErrorClassification.FATAL


def is_retriable(error: Optional[BaseException]) -> bool:
    """Check if an error should be retried"""
    return classify_error(error) is ErrorClassification.RETRIABLE
