from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from services.router.app import main as router_main
from services.router.app.config import RouterSettings
from services.router.app.main import create_app
from services.router.app.mock_backend import MockInferenceBackend
from snowy.client import SnowyClient
from snowy.config import SnowyClientConfig
from snowy.constants import SNOWY_PROGRAM_ID
from snowy.errors import SnowyHttpError
from snowy.protocol import build_signed_request
from snowy.schemas import GenerateInput, GenerateResponse
from snowy.wallets import KeypairWallet

ENDPOINT = "http://router.test/v1/generate"


def _settings(**overrides: object) -> RouterSettings:
    base = RouterSettings(
        service_name="router",
        log_level="INFO",
        program_id=SNOWY_PROGRAM_ID,
        mock_token_delay_seconds=0.0,
    )
    values = base.__dict__.copy()
    values.update(overrides)
    return RouterSettings(**values)


def _input(**overrides: Any) -> GenerateInput:
    values: dict[str, Any] = {
        "model": "snowy-code",
        "prompt": "write a hello world",
        "temperature": 0.7,
        "max_tokens": 8,
        "timestamp": 1730000000000,
    }
    values.update(overrides)
    return GenerateInput(**values)


def _generate(*, program_id: str = SNOWY_PROGRAM_ID, router_settings: RouterSettings | None = None) -> GenerateResponse:
    app = create_app(router_settings or _settings())

    async def _run() -> GenerateResponse:
        config = SnowyClientConfig(
            endpoint=ENDPOINT,
            program_id=program_id,
            timeout_ms=5_000,
            http_transport=httpx.ASGITransport(app=app),
        )
        async with SnowyClient(config) as client:
            return await client.generate(KeypairWallet.generate(), _input())

    return asyncio.run(_run())


def _post_raw(body: dict[str, Any]) -> httpx.Response:
    app = create_app(_settings())

    async def _run() -> httpx.Response:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://router.test") as client:
            return await client.post("/v1/generate", json=body)

    return asyncio.run(_run())


def _signed_wire() -> dict[str, Any]:
    request = asyncio.run(build_signed_request(_input(), KeypairWallet.generate(), SNOWY_PROGRAM_ID))
    return request.to_wire()


def test_end_to_end_generate_through_router() -> None:
    response = _generate()

    assert response.model == "snowy-code"
    assert response.usage.completion_tokens == 8
    assert response.usage.total_tokens == response.usage.prompt_tokens + response.usage.completion_tokens
    assert len(response.output.split()) == 8
    assert response.verification.program_id == SNOWY_PROGRAM_ID


def test_router_rejects_tampered_prompt() -> None:
    body = _signed_wire()
    body["prompt"] = "something the wallet never signed"

    response = _post_raw(body)

    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "INVALID_SIGNATURE"


def test_router_rejects_swapped_signature() -> None:
    body = _signed_wire()
    body["signature"] = _signed_wire()["signature"]

    response = _post_raw(body)
    assert response.status_code == 401


def test_router_rejects_other_program() -> None:
    with pytest.raises(SnowyHttpError) as excinfo:
        _generate(program_id="OtherProgram11111")

    assert excinfo.value.status == 403
    assert json.loads(excinfo.value.body_text)["detail"]["error"]["code"] == "PROGRAM_MISMATCH"


def test_router_rejects_unknown_fields() -> None:
    body = _signed_wire()
    body["apiKey"] = "sk-123"

    assert _post_raw(body).status_code == 422


def test_healthz() -> None:
    app = create_app(_settings())

    async def _run() -> httpx.Response:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://router.test") as client:
            return await client.get("/healthz")

    response = asyncio.run(_run())
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_mock_backend_is_deterministic() -> None:
    backend = MockInferenceBackend()

    async def _run() -> tuple[str, str]:
        first = await backend.complete(model="snowy-meme", prompt="gm", max_tokens=5, temperature=0.5)
        second = await backend.complete(model="snowy-meme", prompt="gm", max_tokens=5, temperature=0.5)
        return first.text, second.text

    first, second = asyncio.run(_run())
    assert first == second
    assert len(first.split()) == 5


def test_run_serves_app_on_configured_address(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[Any, dict[str, Any]]] = []
    monkeypatch.setattr(router_main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    router_main.run(_settings(host="127.0.0.1", port=9100))

    [(app, kwargs)] = calls
    assert app.state.settings.port == 9100
    assert kwargs == {"host": "127.0.0.1", "port": 9100, "log_config": None}
