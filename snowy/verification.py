from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from snowy.errors import InvalidResponseShapeError, VerificationMismatchError
from snowy.schemas import GenerateResponse, SignedRequest


def _error_field(error: dict[str, Any]) -> str:
    loc = [str(part) for part in error.get("loc", ())]
    return ".".join(loc) or "response"


def validate_generate_response(payload: Any) -> GenerateResponse:
    try:
        return GenerateResponse.model_validate(payload, by_alias=True, by_name=False)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise InvalidResponseShapeError(_error_field(first), first["msg"].lower()) from exc


def verify_response_binding(response: GenerateResponse, request: SignedRequest) -> None:
    """Assert the response echoes exactly what was sent; first mismatch wins."""
    checks = (
        ("requestHash", request.request_hash, response.verification.request_hash),
        ("signer", request.signer, response.verification.signer),
        ("programId", request.program_id, response.verification.program_id),
    )
    for field, expected, actual in checks:
        if actual != expected:
            raise VerificationMismatchError(field, expected=expected, actual=actual)


def verify_generate_response(payload: Any, request: SignedRequest) -> GenerateResponse:
    response = validate_generate_response(payload)
    verify_response_binding(response, request)
    return response
