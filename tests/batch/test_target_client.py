"""Tests for darkpool_batch.services.target_client -- HttpTargetClient over httpx."""

import json
import time

import httpx
import pytest

from darkpool_kernel.exceptions import DispatchError, DispatchTimeoutError

from darkpool_batch.services.target_client import HttpTargetClient


def _client(handler, **kwargs) -> HttpTargetClient:
    return HttpTargetClient(transport=httpx.MockTransport(handler), **kwargs)


class _TrickleStream(httpx.SyncByteStream):
    """Sends the body one byte at a time, pausing between bytes."""

    def __init__(self, body: bytes, pause: float):
        self._body = body
        self._pause = pause

    def __iter__(self):
        for byte in self._body:
            time.sleep(self._pause)
            yield bytes([byte])


class TestHttpTargetClient:

    def test_posts_payload_as_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers["content-type"]
            seen["user_agent"] = request.headers["user-agent"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"filled": True})

        with _client(handler, user_agent="pool-test") as client:
            response = client.send("https://target.example/api", '{"size": 3}')

        assert seen == {
            "method": "POST",
            "url": "https://target.example/api",
            "content_type": "application/json",
            "user_agent": "pool-test",
            "body": {"size": 3},
        }
        assert response.status_code == 200
        assert response.ok is True
        assert response.body == {"filled": True}

    def test_error_status_is_still_a_response(self):
        client = _client(lambda request: httpx.Response(503, json={"error": "busy"}))
        response = client.send("https://target.example/api", "{}")
        assert response.status_code == 503
        assert response.ok is False
        assert response.body == {"error": "busy"}

    def test_non_json_body_raises(self):
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(DispatchError) as exc_info:
            client.send("https://target.example/api", "{}")
        assert "not JSON" in exc_info.value.reason

    def test_connection_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DispatchError) as exc_info:
            _client(handler).send("https://target.example/api", "{}")
        assert not isinstance(exc_info.value, DispatchTimeoutError)
        assert exc_info.value.target_endpoint == "https://target.example/api"

    def test_timeout_raises_timeout_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = _client(handler, timeout_seconds=1.5)
        with pytest.raises(DispatchTimeoutError) as exc_info:
            client.send("https://target.example/api", "{}")
        assert exc_info.value.timeout_seconds == 1.5


    def test_slow_body_is_bounded_by_overall_timeout(self):
        body = json.dumps({"filled": True, "pad": "x" * 10}).encode()

        def handler(request):
            return httpx.Response(200, stream=_TrickleStream(body, pause=0.05))

        client = _client(handler, timeout_seconds=0.2)
        start = time.monotonic()
        with pytest.raises(DispatchTimeoutError) as exc_info:
            client.send("https://target.example/api", "{}")
        elapsed = time.monotonic() - start

        assert exc_info.value.timeout_seconds == 0.2
        assert elapsed < len(body) * 0.05

    def test_slow_body_within_timeout_is_a_response(self):
        def handler(request):
            return httpx.Response(200, stream=_TrickleStream(b'{"ok": 1}', pause=0.01))

        response = _client(handler, timeout_seconds=5.0).send(
            "https://target.example/api", "{}",
        )
        assert response.body == {"ok": 1}
