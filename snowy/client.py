from __future__ import annotations

import logging
from types import TracebackType

from snowy.cancellation import CancelToken
from snowy.config import SnowyClientConfig, validate_client_config
from snowy.errors import SnowyError
from snowy.protocol import build_signed_request
from snowy.schemas import GenerateInput, GenerateResponse
from snowy.signer import WalletIdentity
from snowy.transport import Transport
from snowy.verification import verify_generate_response


class SnowyClient:
    def __init__(self, config: SnowyClientConfig, *, logger: logging.Logger | None = None) -> None:
        validate_client_config(config)
        self._config = config
        self._logger = logger or logging.getLogger("snowy.client")
        self._transport = Transport(
            timeout_ms=config.timeout_ms,
            client=config.http_client,
            transport=config.http_transport,
            logger=self._logger,
        )

    @property
    def network(self) -> str:
        return self._config.network

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    @property
    def program_id(self) -> str:
        return self._config.program_id

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> "SnowyClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def generate(
        self,
        wallet: WalletIdentity,
        generate_input: GenerateInput,
        *,
        cancel_token: CancelToken | None = None,
        timeout_ms: float | None = None,
    ) -> GenerateResponse:
        """Run one signed inference request.

        Security model:
        - build a deterministic payload bound to this client's program id
        - SHA-256 hash its canonical JSON
        - have the wallet sign the 32-byte hash
        - POST the signed payload to the router
        - accept the response only if it echoes the hash, signer and program id

        ``cancel_token`` aborts the network wait promptly. A wallet signature
        already underway is allowed to finish; the token is checked again
        right after it. ``timeout_ms`` overrides the configured transport
        timeout for this call.
        """
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        request = await build_signed_request(
            generate_input,
            wallet,
            self._config.program_id,
            hasher=self._config.hasher,
        )
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        try:
            payload = await self._transport.post_json(
                self._config.endpoint,
                request.to_wire(),
                timeout_ms=timeout_ms,
                cancel_token=cancel_token,
            )
            response = verify_generate_response(payload, request)
        except SnowyError as exc:
            self._logger.warning(
                "generate failed",
                extra={
                    "request_hash": request.request_hash,
                    "error_kind": exc.kind.value,
                    "error": exc.message,
                },
            )
            raise

        self._logger.info(
            "generate completed",
            extra={
                "request_hash": request.request_hash,
                "model": response.model,
                "total_tokens": response.usage.total_tokens,
            },
        )
        return response
