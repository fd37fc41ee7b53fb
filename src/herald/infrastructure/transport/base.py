"""Base transport sender interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from herald.infrastructure.batch import BatchAccumulator


class TransportSender(ABC):
    """Abstract base class for transport senders"""

    def __init__(self, config: Dict[str, Any]):
        """Initialize sender with configuration

        Args:
            config: Sender configuration dictionary

        Raises:
            ValueError: If configuration is invalid
        """
        self.config = config
        self._validate_config(config)

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate sender configuration

        Args:
            config: Configuration dictionary

        Raises:
            ValueError: If configuration is invalid
        """
        # Override in subclasses for specific validation
        pass

    @abstractmethod
    def send(self, batch: BatchAccumulator, timeout: float) -> None:
        """Send a batch in a single attempt

        Args:
            batch: Filled batch to send (not disposed by the sender)
            timeout: Timeout for this attempt, in seconds

        Raises:
            PublishError: If the send fails; ``is_transient`` tells whether a retry may help
        """
        pass
