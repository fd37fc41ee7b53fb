"""Retry options model."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RetryMode(str, Enum):
    """Growth law used to turn an attempt number into a base delay"""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"


class RetryOptions(BaseModel):
    """Configuration for retrying failed sends.

    Durations are expressed in seconds.

    Attributes:
        maximum_retries: Maximum number of retries before giving up
        delay: Base delay between attempts
        maximum_delay: Upper bound for any computed delay
        try_timeout: Timeout applied to each individual attempt
        mode: Backoff mode (fixed or exponential)
    """

    maximum_retries: int = Field(3, ge=0)
    delay: float = Field(0.8, ge=0.0)
    maximum_delay: float = Field(60.0, ge=0.0)
    try_timeout: float = Field(60.0, gt=0.0)
    mode: RetryMode = RetryMode.EXPONENTIAL

    model_config = ConfigDict(frozen=True)
