"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from herald.domain.config.batch import BatchOptions
from herald.domain.config.retry import RetryOptions
from herald.domain.config.transport import TransportConfig


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        retry: Retry policy options
        batch: Batch sizing options
        transport: Transport sender configuration
    """

    retry: RetryOptions = Field(default_factory=RetryOptions)
    batch: BatchOptions = Field(default_factory=BatchOptions)
    transport: TransportConfig = Field(default_factory=TransportConfig)

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "retry": {
                    "maximum_retries": 3,
                    "delay": 0.8,
                    "maximum_delay": 60.0,
                    "try_timeout": 60.0,
                    "mode": "exponential",
                },
                "batch": {
                    "maximum_size_in_bytes": 1048576,
                    "partition_key": None,
                },
                "transport": {
                    "kind": "http",
                    "url": "https://events.example.com/batches",
                },
            }
        },
    )
