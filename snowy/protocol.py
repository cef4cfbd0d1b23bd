from __future__ import annotations

import math
import time
from typing import Callable

from snowy.constants import MAX_SAFE_INTEGER, SNOWY_MODELS
from snowy.errors import InvalidInputError, RequestVerificationError, SnowyError
from snowy.hashing import DEFAULT_HASHER, HashProvider, hash_canonical
from snowy.schemas import GenerateInput, HashableRequest, SignedRequest
from snowy.signer import (
    WalletIdentity,
    ensure_base58_public_key,
    sign_digest,
    verify_digest_signature,
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _require_number(field: str, value: object) -> float | int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(field, "must be a finite number")
    if isinstance(value, int):
        if abs(value) > MAX_SAFE_INTEGER:
            raise InvalidInputError(field, "must be within the safe integer range")
    elif not math.isfinite(value):
        raise InvalidInputError(field, "must be a finite number")
    return value


def _require_int(field: str, value: object) -> int:
    number = _require_number(field, value)
    if isinstance(number, float):
        if not number.is_integer():
            raise InvalidInputError(field, "must be an integer")
        if abs(number) > MAX_SAFE_INTEGER:
            raise InvalidInputError(field, "must be within the safe integer range")
        return int(number)
    return number


def validate_generate_input(
    generate_input: GenerateInput,
    *,
    clock: Callable[[], int] = _now_ms,
) -> GenerateInput:
    """Check user input and return a copy with the timestamp filled in."""
    if not isinstance(generate_input, GenerateInput):
        raise InvalidInputError("input", "must be a GenerateInput")

    if generate_input.model not in SNOWY_MODELS:
        raise InvalidInputError("model", f"is not a supported model: {generate_input.model!r}")
    if not isinstance(generate_input.prompt, str) or not generate_input.prompt.strip():
        raise InvalidInputError("prompt", "must be a non-empty string")
    temperature = _require_number("temperature", generate_input.temperature)
    max_tokens = _require_int("maxTokens", generate_input.max_tokens)
    timestamp = _require_int(
        "timestamp",
        clock() if generate_input.timestamp is None else generate_input.timestamp,
    )
    return GenerateInput(
        model=generate_input.model,
        prompt=generate_input.prompt,
        temperature=temperature,
        max_tokens=max_tokens,
        timestamp=timestamp,
    )


def build_hashable_request(
    generate_input: GenerateInput,
    *,
    program_id: str,
    signer: str,
) -> HashableRequest:
    return HashableRequest(
        program_id=program_id,
        model=generate_input.model,
        prompt=generate_input.prompt,
        temperature=generate_input.temperature,
        max_tokens=generate_input.max_tokens,
        timestamp=generate_input.timestamp,
        signer=signer,
    )


async def build_signed_request(
    generate_input: GenerateInput,
    wallet: WalletIdentity,
    program_id: str,
    *,
    hasher: HashProvider = DEFAULT_HASHER,
    clock: Callable[[], int] = _now_ms,
) -> SignedRequest:
    """Validate, hash and sign one request.

    Validation happens before any hashing or signing, so a bad input or a
    bad wallet key never reaches the wallet. Nothing here is retried.
    """
    validated = validate_generate_input(generate_input, clock=clock)
    if wallet is None:
        raise InvalidInputError("wallet", "is required")
    ensure_base58_public_key(wallet.public_key_id)

    to_hash = build_hashable_request(validated, program_id=program_id, signer=wallet.public_key_id)
    request_digest = hash_canonical(to_hash.to_payload(), hasher)
    signature = await sign_digest(wallet, request_digest.digest)

    return SignedRequest(
        **to_hash.model_dump(),
        request_hash=request_digest.base58,
        signature=signature,
    )


def verify_signed_request(
    request: SignedRequest,
    *,
    expected_program_id: str | None = None,
    hasher: HashProvider = DEFAULT_HASHER,
) -> bytes:
    """Re-derive the request hash and check the signature over it.

    Returns the 32-byte digest on success. This is what a router does before
    serving a request; freshness of ``timestamp`` is left to the caller.
    """
    if expected_program_id is not None and request.program_id != expected_program_id:
        raise RequestVerificationError("programId", "does not match this router")

    try:
        request_digest = hash_canonical(request.to_payload(), hasher)
    except SnowyError as exc:
        raise RequestVerificationError("requestHash", f"cannot be re-derived: {exc.message}") from exc
    if request_digest.base58 != request.request_hash:
        raise RequestVerificationError("requestHash", "does not match the request payload")

    try:
        ensure_base58_public_key(request.signer)
    except SnowyError as exc:
        raise RequestVerificationError("signer", exc.message) from exc
    if not verify_digest_signature(request.signer, request_digest.digest, request.signature):
        raise RequestVerificationError("signature", "is not a valid Ed25519 signature by signer")
    return request_digest.digest
