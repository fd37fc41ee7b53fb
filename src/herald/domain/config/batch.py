"""Batch sizing configuration model."""

from typing import Optional

from pydantic import BaseModel, Field


class BatchOptions(BaseModel):
    """Configuration for building outgoing batches.

    Attributes:
        maximum_size_in_bytes: Size limit imposed by the server for one batch
        partition_key: Optional routing hint applied to every batch
        small_message_threshold: Largest encoded size that counts as a small message
        small_message_overhead: Framing bytes charged for a small message
        large_message_overhead: Framing bytes charged for a large message
    """

    maximum_size_in_bytes: int = Field(1024 * 1024, gt=0)
    partition_key: Optional[str] = None
    small_message_threshold: int = Field(255, ge=0)
    small_message_overhead: int = Field(5, ge=0)
    large_message_overhead: int = Field(8, ge=0)
