"""Mock transport sender for testing and dry runs"""

import logging
from typing import Any, Dict, List, Optional

from herald.infrastructure.batch import BatchAccumulator
from herald.infrastructure.transport.base import TransportSender

logger = logging.getLogger(__name__)


class MockTransportSender(TransportSender):
    """Sender that records batches instead of sending them"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize mock sender

        Args:
            config: Optional configuration with:
                - failures: Errors to raise, one per call, before sends start succeeding
                - representation: Representation requested from batches (default: json)
        """
        if config is None:
            config = {}
        super().__init__(config)
        self.failures: List[BaseException] = list(config.get("failures", []))
        self.representation = config.get("representation", "json")
        self.sent: List[List[bytes]] = []
        self.timeouts: List[float] = []
        self.calls = 0

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate mock sender configuration"""
        failures = config.get("failures", [])
        if not all(isinstance(f, BaseException) for f in failures):
            raise ValueError("failures must be a list of exceptions")

    def send(self, batch: BatchAccumulator, timeout: float) -> None:
        self.calls += 1
        self.timeouts.append(timeout)
        if self.failures:
            raise self.failures.pop(0)

        bodies = [message.body for message in batch.as_sequence(self.representation)]
        self.sent.append(bodies)
        logger.info(f"Mock sent batch of {batch.count} events ({batch.size_in_bytes} bytes)")
