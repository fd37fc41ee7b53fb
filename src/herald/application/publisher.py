"""Event publisher - packs events into batches and sends them with retries"""

import logging
import threading
import time
from typing import Any, Dict, Iterable, List, Optional

from herald.domain.config.batch import BatchOptions
from herald.domain.models.errors import MessageTooLargeError, OperationCancelledError
from herald.domain.models.event import EventData
from herald.domain.policies.retry_policy import RetryPolicy
from herald.infrastructure.batch import BatchAccumulator
from herald.infrastructure.encoding.base import MessageEncoder
from herald.infrastructure.encoding.json_encoder import JsonMessageEncoder
from herald.infrastructure.retry import create_retrying, retry_count
from herald.infrastructure.transport.base import TransportSender

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publishes events through a transport sender.

    Events are packed, in order, into as few batches as fit the configured
    size limit. Each batch is sent with retries driven by the retry policy
    and disposed once the send has finished, successfully or not.
    """

    def __init__(
        self,
        sender: TransportSender,
        encoder: Optional[MessageEncoder] = None,
        retry_policy: Optional[RetryPolicy] = None,
        batch_options: Optional[BatchOptions] = None,
        sleep=None,
        cancellation: Optional[threading.Event] = None,
    ):
        """Initialize publisher

        Args:
            sender: Transport sender used for every batch
            encoder: Message encoder (default: JsonMessageEncoder)
            retry_policy: Retry policy (default: RetryPolicy with default options)
            batch_options: Batch sizing options (default: BatchOptions())
            sleep: Function used to wait between attempts (default: time.sleep)
            cancellation: Optional event; once set, no further attempt is started
        """
        self.sender = sender
        self.encoder = encoder or JsonMessageEncoder()
        self.retry_policy = retry_policy or RetryPolicy()
        self.batch_options = batch_options or BatchOptions()
        self.cancellation = cancellation
        self._sleep = sleep or time.sleep

    def create_batch(self, partition_key: Optional[str] = None) -> BatchAccumulator:
        """Create an empty batch using the configured size limit"""
        return BatchAccumulator.from_options(self.encoder, self.batch_options, partition_key)

    def send_batch(self, batch: BatchAccumulator) -> None:
        """Send a batch, retrying transient failures

        The batch is not disposed; the caller owns it.

        Raises:
            OperationCancelledError: If cancellation was requested before an attempt
            Exception: The error of the last attempt when the policy stops retrying
        """
        self._raise_if_cancelled()
        for attempt in create_retrying(self.retry_policy, sleep=self._wait):
            with attempt:
                timeout = self.retry_policy.calculate_try_timeout(retry_count(attempt.retry_state))
                self.sender.send(batch, timeout)

    def publish(self, events: Iterable[EventData], partition_key: Optional[str] = None) -> Dict[str, Any]:
        """Publish events in as few batches as possible

        Args:
            events: Events to publish, in send order
            partition_key: Optional partition key (overrides the configured one)

        Returns:
            Dictionary with publishing statistics

        Raises:
            MessageTooLargeError: If an event does not fit into an empty batch
        """
        stats = {
            "total_events": 0,
            "batches_sent": 0,
            "bytes_sent": 0,
        }

        batch = self.create_batch(partition_key)
        try:
            for event in events:
                stats["total_events"] += 1
                if batch.try_add(event):
                    continue
                if batch.count == 0:
                    raise MessageTooLargeError(
                        f"Event does not fit into an empty batch of {batch.maximum_size_in_bytes} bytes"
                    )

                self._send_and_count(batch, stats)
                batch.dispose()
                batch = self.create_batch(partition_key)
                if not batch.try_add(event):
                    raise MessageTooLargeError(
                        f"Event does not fit into an empty batch of {batch.maximum_size_in_bytes} bytes"
                    )

            if batch.count > 0:
                self._send_and_count(batch, stats)
        finally:
            batch.dispose()

        logger.info(
            f"Published {stats['total_events']} events in {stats['batches_sent']} batches "
            f"({stats['bytes_sent']} bytes)"
        )
        return stats

    def publish_batches(self, batches: List[BatchAccumulator]) -> None:
        """Send caller-built batches in order, disposing each one afterwards"""
        try:
            for batch in batches:
                self.send_batch(batch)
        finally:
            for batch in batches:
                batch.dispose()

    def _send_and_count(self, batch: BatchAccumulator, stats: Dict[str, Any]) -> None:
        self.send_batch(batch)
        stats["batches_sent"] += 1
        stats["bytes_sent"] += batch.size_in_bytes

    def _wait(self, seconds: float) -> None:
        if self.cancellation is None:
            self._sleep(seconds)
            return
        if self.cancellation.wait(seconds):
            raise OperationCancelledError("Publishing was cancelled while waiting to retry")

    def _raise_if_cancelled(self) -> None:
        if self.cancellation is not None and self.cancellation.is_set():
            raise OperationCancelledError("Publishing was cancelled")
