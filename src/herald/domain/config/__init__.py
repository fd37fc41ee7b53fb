"""Configuration models with Pydantic validation."""

from herald.domain.config.app import AppConfig
from herald.domain.config.batch import BatchOptions
from herald.domain.config.retry import RetryMode, RetryOptions
from herald.domain.config.transport import TransportConfig

__all__ = [
    "AppConfig",
    "BatchOptions",
    "RetryMode",
    "RetryOptions",
    "TransportConfig",
]
