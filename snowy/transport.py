from __future__ import annotations

import asyncio
import json
import logging
from types import TracebackType
from typing import Any

import httpx

from snowy.cancellation import CancelToken
from snowy.errors import (
    EmptyResponseError,
    InvalidConfigError,
    InvalidInputError,
    MalformedResponseError,
    NetworkFailureError,
    RequestCancelledError,
    RequestTimeoutError,
    SnowyHttpError,
)

_JSON_HEADERS = {
    "content-type": "application/json",
    "accept": "application/json",
}


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token}")


async def _release(*tasks: asyncio.Task[Any] | None) -> None:
    owned = [task for task in tasks if task is not None]
    for task in owned:
        if not task.done():
            task.cancel()
    if owned:
        await asyncio.gather(*owned, return_exceptions=True)


class Transport:
    """JSON-over-HTTP POST with a timeout, cooperative cancellation and typed failures.

    ``client`` or ``transport`` plug in a caller-owned ``httpx.AsyncClient`` or
    network layer (``httpx.MockTransport`` in tests). A client created here is
    closed by :meth:`aclose`. Nothing is retried.
    """

    def __init__(
        self,
        *,
        timeout_ms: float | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if client is not None and transport is not None:
            raise InvalidConfigError("http_transport", "cannot be combined with http_client")
        if timeout_ms is not None and timeout_ms <= 0:
            raise InvalidConfigError("timeout_ms", "must be a positive number of milliseconds")
        self._timeout_ms = timeout_ms
        self._owns_client = client is None
        # The deadline is enforced by post_json, not by httpx.
        self._client = client or httpx.AsyncClient(transport=transport, timeout=httpx.Timeout(None))
        self._logger = logger or logging.getLogger("snowy.transport")

    @property
    def timeout_ms(self) -> float | None:
        return self._timeout_ms

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def post_json(
        self,
        url: str,
        body: Any,
        *,
        timeout_ms: float | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Any:
        effective_timeout_ms = self._timeout_ms if timeout_ms is None else timeout_ms
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        try:
            content = json.dumps(body, separators=(",", ":"), allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("body", f"is not JSON serializable: {exc}") from exc

        self._logger.debug(
            "posting json request",
            extra={"url": url, "timeout_ms": effective_timeout_ms, "bytes": len(content)},
        )
        request_task = asyncio.create_task(self._client.post(url, content=content, headers=_JSON_HEADERS))
        cancel_task = asyncio.create_task(cancel_token.wait()) if cancel_token is not None else None
        waiters: set[asyncio.Task[Any]] = {request_task}
        if cancel_task is not None:
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=effective_timeout_ms / 1000 if effective_timeout_ms is not None else None,
                return_when=asyncio.FIRST_COMPLETED,
            )
            if cancel_token is not None and cancel_token.cancelled:
                self._logger.warning("request cancelled", extra={"url": url, "reason": cancel_token.reason})
                raise RequestCancelledError(cancel_token.reason)
            if request_task not in done:
                self._logger.warning(
                    "request timed out",
                    extra={"url": url, "timeout_ms": effective_timeout_ms},
                )
                raise RequestTimeoutError(effective_timeout_ms)
            try:
                response = request_task.result()
            except httpx.TimeoutException as exc:
                raise RequestTimeoutError(effective_timeout_ms) from exc
            except Exception as exc:
                self._logger.warning("network failure", extra={"url": url, "error": str(exc)})
                raise NetworkFailureError(url, exc) from exc
        finally:
            await _release(request_task, cancel_task)

        return self._decode(url, response)

    def _decode(self, url: str, response: httpx.Response) -> Any:
        text = response.text
        if not response.is_success:
            raise SnowyHttpError(
                status=response.status_code,
                status_text=response.reason_phrase,
                url=url,
                body_text=text,
            )
        if not text:
            raise EmptyResponseError(url)
        try:
            return json.loads(text, parse_constant=_reject_constant)
        except ValueError as exc:
            raise MalformedResponseError(url, text, exc) from exc
