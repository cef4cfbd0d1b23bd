from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from services.router.app.config import RouterSettings, load_settings
from services.router.app.mock_backend import MockInferenceBackend
from snowy.errors import RequestVerificationError
from snowy.logging import configure_logging
from snowy.protocol import verify_signed_request
from snowy.schemas import GenerateResponse, SignedRequest, Usage, Verification

logger = logging.getLogger("router")


def _error_payload(code: str, message: str) -> dict[str, dict[str, str]]:
    return {"error": {"code": code, "message": message}}


def create_app(settings: RouterSettings | None = None) -> FastAPI:
    router_settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(service_name=router_settings.service_name, level=router_settings.log_level)
        logger.info("router started", extra={"program_id": router_settings.program_id})
        try:
            yield
        finally:
            logger.info("router stopped")

    app = FastAPI(title="SNOWY Router", version="1.0.0", lifespan=lifespan)
    app.state.settings = router_settings
    app.state.backend = MockInferenceBackend(token_delay_seconds=router_settings.mock_token_delay_seconds)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/v1/generate")
    async def generate(body: SignedRequest, request: Request) -> Response:
        app_settings: RouterSettings = request.app.state.settings
        backend: MockInferenceBackend = request.app.state.backend

        try:
            verify_signed_request(body, expected_program_id=app_settings.program_id)
        except RequestVerificationError as exc:
            logger.warning(
                "rejected signed request",
                extra={"request_hash": body.request_hash, "field": exc.field, "error": exc.message},
            )
            if exc.field == "programId":
                raise HTTPException(
                    status_code=403,
                    detail=_error_payload("PROGRAM_MISMATCH", exc.message),
                ) from exc
            raise HTTPException(
                status_code=401,
                detail=_error_payload("INVALID_SIGNATURE", exc.message),
            ) from exc

        completion = await backend.complete(
            model=body.model,
            prompt=body.prompt,
            max_tokens=body.max_tokens,
            temperature=body.temperature,
        )
        response = GenerateResponse(
            output=completion.text,
            model=body.model,
            usage=Usage(
                prompt_tokens=completion.prompt_tokens,
                completion_tokens=completion.completion_tokens,
                total_tokens=completion.total_tokens,
            ),
            verification=Verification(
                request_hash=body.request_hash,
                signer=body.signer,
                program_id=body.program_id,
            ),
        )
        logger.info(
            "served signed request",
            extra={
                "request_hash": body.request_hash,
                "signer": body.signer,
                "model": body.model,
                "total_tokens": completion.total_tokens,
            },
        )
        return JSONResponse(content=response.to_wire())

    return app


app = create_app()


def run(settings: RouterSettings | None = None) -> None:
    router_settings = settings or load_settings()
    uvicorn.run(
        create_app(router_settings),
        host=router_settings.host,
        port=router_settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
