from __future__ import annotations

import asyncio

from snowy.errors import RequestCancelledError


class CancelToken:
    """Cooperative cancellation signal passed explicitly through one call.

    The transport aborts its in-flight request as soon as the token fires.
    A wallet signature already in progress is not interrupted; the client
    only checks the token before and after signing.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RequestCancelledError(self._reason)
