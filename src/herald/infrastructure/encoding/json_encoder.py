"""JSON encoding of events and batch envelopes.

An event is encoded as a compact JSON object:

    {"body":"<base64>","properties":{...}}

and a batch is framed as:

    {"partition_key":<key or null>,"events":[<event>,<event>,...]}
"""

from __future__ import annotations

import base64
import json
from typing import Iterable, Optional

from herald.domain.models.encoded_message import EncodedMessage
from herald.domain.models.event import EventData
from herald.infrastructure.encoding.base import MessageEncoder

JSON_REPRESENTATION = "json"

_SEPARATORS = (",", ":")


def _envelope_parts(partition_key: Optional[str]) -> tuple[bytes, bytes]:
    head = '{"partition_key":' + json.dumps(partition_key, separators=_SEPARATORS) + ',"events":['
    return head.encode("utf-8"), b"]}"


def frame_batch(partition_key: Optional[str], messages: Iterable[EncodedMessage]) -> bytes:
    """Build the envelope bytes for a batch of encoded events

    Args:
        partition_key: Partition key of the batch
        messages: Encoded events in send order

    Returns:
        UTF-8 JSON document containing all events
    """
    head, tail = _envelope_parts(partition_key)
    return head + b",".join(message.body for message in messages) + tail


class JsonMessageEncoder(MessageEncoder):
    """Encodes events as JSON objects with a base64 body"""

    representation = JSON_REPRESENTATION

    def encode(self, event: EventData, partition_key: Optional[str] = None) -> EncodedMessage:
        document = {
            "body": base64.b64encode(bytes(event.body)).decode("ascii"),
            "properties": event.properties,
        }
        try:
            payload = json.dumps(document, separators=_SEPARATORS, sort_keys=True)
        except TypeError as e:
            raise ValueError(f"Event properties are not JSON serializable: {e}") from e
        return EncodedMessage(body=payload.encode("utf-8"), partition_key=partition_key)

    def encode_empty_envelope(self, partition_key: Optional[str] = None) -> EncodedMessage:
        return EncodedMessage(body=frame_batch(partition_key, []), partition_key=partition_key)


def decode_event(body: bytes) -> EventData:
    """Decode an event encoded by JsonMessageEncoder"""
    document = json.loads(body)
    return EventData(
        body=base64.b64decode(document["body"]),
        properties=document.get("properties") or {},
    )
