"""
Target clients -- deliver a stored payload to its target endpoint.

``TargetClient`` is the seam the dispatcher depends on.  ``HttpTargetClient``
is the production implementation: POST the payload as JSON, wait up to the
configured timeout, and decode the JSON body.  The timeout bounds the whole
call: httpx applies it per connect/read/write phase, so the body is
streamed and the overall deadline is checked after every chunk.

A response with any HTTP status is a response.  Only the absence of a
usable response raises:

    httpx.TimeoutException       -> DispatchTimeoutError
    overall deadline exceeded    -> DispatchTimeoutError
    other transport / URL error  -> DispatchError
    body is not JSON             -> DispatchError
"""

from __future__ import annotations

import json
import time
from typing import Protocol

import httpx

from darkpool_kernel.exceptions import DispatchError, DispatchTimeoutError
from darkpool_kernel.logging_config import get_logger

from darkpool_batch.domain.types import TargetResponse

logger = get_logger("batch.target_client")


class TargetClient(Protocol):
    def send(self, target_endpoint: str, request_payload: str) -> TargetResponse:
        """Deliver ``request_payload`` (serialized JSON) to ``target_endpoint``."""
        ...

    def close(self) -> None:
        ...


class HttpTargetClient:
    """POSTs payloads over HTTP(S) with a bounded timeout."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        user_agent: str = "agent-dark-pool",
        transport: httpx.BaseTransport | None = None,
    ):
        self._timeout_seconds = timeout_seconds
        self._client = httpx.Client(
            timeout=timeout_seconds,
            headers={
                "Content-Type": "application/json",
                "User-Agent": user_agent,
            },
            transport=transport,
        )

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def send(self, target_endpoint: str, request_payload: str) -> TargetResponse:
        deadline = time.monotonic() + self._timeout_seconds
        try:
            with self._client.stream(
                "POST", target_endpoint, content=request_payload,
            ) as response:
                content = self._read_body(response, target_endpoint, deadline)
        except httpx.TimeoutException as exc:
            raise DispatchTimeoutError(target_endpoint, self._timeout_seconds) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DispatchError(
                target_endpoint, str(exc) or type(exc).__name__,
            ) from exc

        try:
            body = json.loads(content)
        except ValueError as exc:
            raise DispatchError(
                target_endpoint,
                f"response body is not JSON (HTTP {response.status_code})",
            ) from exc

        logger.debug(
            "target_responded",
            extra={"status_code": response.status_code},
        )
        return TargetResponse(
            status_code=response.status_code,
            ok=response.is_success,
            body=body,
        )

    def _read_body(
        self,
        response: httpx.Response,
        target_endpoint: str,
        deadline: float,
    ) -> bytes:
        chunks: list[bytes] = []
        for chunk in response.iter_bytes():
            if time.monotonic() > deadline:
                logger.warning(
                    "target_deadline_exceeded",
                    extra={"timeout_seconds": self._timeout_seconds},
                )
                raise DispatchTimeoutError(target_endpoint, self._timeout_seconds)
            chunks.append(chunk)
        return b"".join(chunks)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpTargetClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
