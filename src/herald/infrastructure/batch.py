"""Byte-budgeted accumulation of encoded events into one batch"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from herald.domain.config.batch import BatchOptions
from herald.domain.models.encoded_message import EncodedMessage
from herald.domain.models.errors import BatchDisposedError, UnsupportedRepresentationError
from herald.domain.models.event import EventData
from herald.infrastructure.encoding.base import MessageEncoder

logger = logging.getLogger(__name__)

# Framing cost the transport adds per message, by encoded size class.
OVERHEAD_BYTES_SMALL_MESSAGE = 5
OVERHEAD_BYTES_LARGE_MESSAGE = 8
MAXIMUM_BYTES_SMALL_MESSAGE = 255


class BatchAccumulator:
    """A set of encoded events whose total size never exceeds a maximum.

    The accumulator owns every encoded message it accepts until it is
    disposed. It is meant to be filled by a single producer; concurrent
    ``try_add`` calls must be serialized by the caller.
    """

    def __init__(
        self,
        encoder: MessageEncoder,
        maximum_size_in_bytes: int,
        partition_key: Optional[str] = None,
        *,
        small_message_threshold: int = MAXIMUM_BYTES_SMALL_MESSAGE,
        small_message_overhead: int = OVERHEAD_BYTES_SMALL_MESSAGE,
        large_message_overhead: int = OVERHEAD_BYTES_LARGE_MESSAGE,
    ):
        """Initialize the batch, reserving space for its envelope

        Args:
            encoder: Encoder used to turn events into encoded messages
            maximum_size_in_bytes: Size limit of the batch, envelope included
            partition_key: Optional partition key for every event in the batch
            small_message_threshold: Largest encoded size charged the small overhead
            small_message_overhead: Overhead bytes for a small message
            large_message_overhead: Overhead bytes for a large message

        Raises:
            ValueError: If the maximum size is not positive or cannot hold the envelope
        """
        if encoder is None:
            raise ValueError("encoder is required")
        if maximum_size_in_bytes <= 0:
            raise ValueError("maximum_size_in_bytes must be positive")

        self._encoder = encoder
        self._maximum_size_in_bytes = maximum_size_in_bytes
        self._partition_key = partition_key
        self._small_message_threshold = small_message_threshold
        self._small_message_overhead = small_message_overhead
        self._large_message_overhead = large_message_overhead
        self._messages: List[EncodedMessage] = []
        self._disposed = False

        envelope = encoder.encode_empty_envelope(partition_key)
        try:
            envelope_size = envelope.size_in_bytes
        finally:
            envelope.release()
        if envelope_size > maximum_size_in_bytes:
            raise ValueError(
                f"maximum_size_in_bytes ({maximum_size_in_bytes}) is smaller than "
                f"the empty batch envelope ({envelope_size} bytes)"
            )
        self._size_in_bytes = envelope_size

    @classmethod
    def from_options(
        cls, encoder: MessageEncoder, options: BatchOptions, partition_key: Optional[str] = None
    ) -> "BatchAccumulator":
        """Create a batch from configured options (partition_key overrides the configured one)"""
        return cls(
            encoder,
            options.maximum_size_in_bytes,
            partition_key if partition_key is not None else options.partition_key,
            small_message_threshold=options.small_message_threshold,
            small_message_overhead=options.small_message_overhead,
            large_message_overhead=options.large_message_overhead,
        )

    @property
    def maximum_size_in_bytes(self) -> int:
        return self._maximum_size_in_bytes

    @property
    def size_in_bytes(self) -> int:
        """Size of the batch as it will be sent, envelope included"""
        return self._size_in_bytes

    @property
    def count(self) -> int:
        return len(self._messages)

    @property
    def partition_key(self) -> Optional[str]:
        return self._partition_key

    @property
    def representation(self) -> str:
        return self._encoder.representation

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def __len__(self) -> int:
        return self.count

    def try_add(self, event: EventData) -> bool:
        """Add an event if it fits within the size limit

        Args:
            event: Event to add

        Returns:
            True if the event was added, False if it would exceed the maximum size

        Raises:
            BatchDisposedError: If the batch has been disposed
        """
        if event is None:
            raise ValueError("event is required")
        self._guard_disposed()

        message = self._encoder.encode(event, self._partition_key)
        try:
            encoded_size = message.size_in_bytes
            if encoded_size <= self._small_message_threshold:
                overhead = self._small_message_overhead
            else:
                overhead = self._large_message_overhead
            size = self._size_in_bytes + encoded_size + overhead

            if size > self._maximum_size_in_bytes:
                logger.debug(
                    f"Event of {encoded_size} bytes rejected: batch would grow to {size} "
                    f"of {self._maximum_size_in_bytes} bytes"
                )
                message.release()
                return False

            self._messages.append(message)
            self._size_in_bytes = size
            return True
        except BaseException:
            message.release()
            raise

    def as_sequence(self, representation: str) -> Tuple[EncodedMessage, ...]:
        """Return the accepted messages, in send order

        Args:
            representation: Representation the caller expects (e.g. "json")

        Raises:
            UnsupportedRepresentationError: If the batch holds a different representation
            BatchDisposedError: If the batch has been disposed
        """
        self._guard_disposed()
        if representation != self._encoder.representation:
            raise UnsupportedRepresentationError(
                f"Batch holds '{self._encoder.representation}' messages, not '{representation}'"
            )
        return tuple(self._messages)

    def dispose(self) -> None:
        """Release every held message and empty the batch (idempotent)"""
        self._disposed = True
        for message in self._messages:
            message.release()
        self._messages.clear()
        self._size_in_bytes = 0

    def __enter__(self) -> "BatchAccumulator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def _guard_disposed(self) -> None:
        if self._disposed:
            raise BatchDisposedError("BatchAccumulator has been disposed")
