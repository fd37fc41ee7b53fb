from __future__ import annotations

import json

import pytest
import requests

from herald.domain.models.errors import PublishError
from herald.domain.models.event import EventData
from herald.infrastructure.batch import BatchAccumulator
from herald.infrastructure.encoding.json_encoder import JsonMessageEncoder
from herald.infrastructure.transport.http import HttpTransportSender


def _make_response(status_code: int, payload: dict | None = None) -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.url = "http://example.test"
    if payload is None:
        payload = {}
    r._content = json.dumps(payload).encode("utf-8")  # type: ignore[attr-defined]
    r.headers["Content-Type"] = "application/json"
    return r


@pytest.fixture
def batch():
    b = BatchAccumulator(JsonMessageEncoder(), 10_000, partition_key="p1")
    b.try_add(EventData.from_text("one"))
    b.try_add(EventData.from_text("two"))
    yield b
    b.dispose()


def test_send_posts_framed_batch(monkeypatch, batch):
    captured = {}

    def fake_post(url, data=None, headers=None, timeout=None):
        captured.update(url=url, data=data, headers=headers, timeout=timeout)
        return _make_response(200, {"ok": True})

    monkeypatch.setattr(requests, "post", fake_post)

    sender = HttpTransportSender({"url": "http://example.test/batches", "headers": {"X-Tenant": "t"}})
    sender.send(batch, timeout=7.5)

    assert captured["url"] == "http://example.test/batches"
    assert captured["timeout"] == 7.5
    assert captured["headers"]["Content-Type"] == "application/json"
    assert captured["headers"]["X-Tenant"] == "t"
    document = json.loads(captured["data"])
    assert document["partition_key"] == "p1"
    assert len(document["events"]) == 2


@pytest.mark.parametrize("status_code", [429, 500, 503])
def test_retriable_status_is_transient(monkeypatch, batch, status_code):
    monkeypatch.setattr(requests, "post", lambda *a, **k: _make_response(status_code))

    sender = HttpTransportSender({"url": "http://example.test"})
    with pytest.raises(PublishError) as exc_info:
        sender.send(batch, timeout=1)

    assert exc_info.value.is_transient is True
    assert isinstance(exc_info.value.__cause__, requests.HTTPError)


@pytest.mark.parametrize("status_code", [400, 401, 403, 404, 413])
def test_client_errors_are_fatal(monkeypatch, batch, status_code):
    monkeypatch.setattr(requests, "post", lambda *a, **k: _make_response(status_code))

    sender = HttpTransportSender({"url": "http://example.test"})
    with pytest.raises(PublishError) as exc_info:
        sender.send(batch, timeout=1)

    assert exc_info.value.is_transient is False


@pytest.mark.parametrize("error", [requests.exceptions.ConnectTimeout(), requests.exceptions.ConnectionError()])
def test_network_errors_are_transient(monkeypatch, batch, error):
    def fake_post(*args, **kwargs):
        raise error

    monkeypatch.setattr(requests, "post", fake_post)

    sender = HttpTransportSender({"url": "http://example.test"})
    with pytest.raises(PublishError) as exc_info:
        sender.send(batch, timeout=1)

    assert exc_info.value.is_transient is True
    assert exc_info.value.__cause__ is error


@pytest.mark.parametrize("config", [{}, {"url": ""}, {"url": "ftp://example.test"}])
def test_invalid_url_rejected(config):
    with pytest.raises(ValueError, match="url"):
        HttpTransportSender(config)
