"""HTTP transport sender (requests).

Posts a framed JSON batch to a single endpoint. Failures are translated into
``PublishError`` so the retry policy can classify them:

- network errors, timeouts, 429 and 5xx are transient
- 401/403 and other 4xx are fatal
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from herald.domain.models.errors import PublishError
from herald.infrastructure.batch import BatchAccumulator
from herald.infrastructure.encoding.json_encoder import JSON_REPRESENTATION, frame_batch
from herald.infrastructure.transport.base import TransportSender

logger = logging.getLogger(__name__)


def _is_transient_status(status_code: Optional[int]) -> bool:
    """Check if an HTTP status should be retried"""
    # Don't retry on auth errors or most 4xx (except 429)
    if status_code in (401, 403):
        return False
    if status_code and 400 <= status_code < 500 and status_code != 429:
        return False
    # Retry on 429 and 5xx
    return True


class HttpTransportSender(TransportSender):
    """Sender that POSTs batches as JSON documents"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        if config is None:
            config = {}
        super().__init__(config)
        self.url: str = config["url"]
        self.headers: Dict[str, str] = {"Content-Type": "application/json"}
        self.headers.update(config.get("headers") or {})

    def _validate_config(self, config: Dict[str, Any]) -> None:
        url = config.get("url")
        if not url:
            raise ValueError("url is required for the http transport")
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise ValueError(f"url must be an http(s) URL, got: {url!r}")

    def send(self, batch: BatchAccumulator, timeout: float) -> None:
        payload = frame_batch(batch.partition_key, batch.as_sequence(JSON_REPRESENTATION))
        logger.debug(f"HTTP POST {self.url} ({len(payload)} bytes, {batch.count} events)")

        try:
            resp = requests.post(self.url, data=payload, headers=self.headers, timeout=timeout)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise PublishError(
                f"Batch rejected with HTTP {status_code}: {e}",
                is_transient=_is_transient_status(status_code),
            ) from e
        except requests.exceptions.RequestException as e:
            # Timeouts and connection failures
            raise PublishError(f"Batch send failed: {e}", is_transient=True) from e

        logger.info(f"Sent batch of {batch.count} events ({batch.size_in_bytes} bytes) to {self.url}")
