from __future__ import annotations

import asyncio

import base58
import pytest

from snowy.canonical import canonical_bytes, canonical_dumps
from snowy.constants import SNOWY_PROGRAM_ID
from snowy.errors import (
    ErrorCategory,
    InvalidInputError,
    InvalidSignatureLengthError,
    InvalidSignerError,
    RequestVerificationError,
    SigningFailedError,
)
from snowy.hashing import sha256, sha256_base58
from snowy.protocol import build_signed_request, verify_signed_request
from snowy.schemas import GenerateInput, SignedRequest
from snowy.signer import encode_base58, verify_digest_signature
from snowy.wallets import KeypairWallet


class StubWallet:
    def __init__(
        self,
        public_key_id: str,
        *,
        signature: object = b"\x01" * 64,
        error: Exception | None = None,
    ) -> None:
        self.public_key_id = public_key_id
        self.calls: list[bytes] = []
        self._signature = signature
        self._error = error

    async def sign(self, message: bytes) -> object:
        self.calls.append(message)
        if self._error is not None:
            raise self._error
        return self._signature


def _wallet() -> KeypairWallet:
    return KeypairWallet.from_seed(bytes(range(32)))


def _input(**overrides: object) -> GenerateInput:
    values: dict[str, object] = {
        "model": "snowy-base",
        "prompt": "hi",
        "temperature": 0.2,
        "max_tokens": 16,
        "timestamp": 1730000000000,
    }
    values.update(overrides)
    return GenerateInput(**values)  # type: ignore[arg-type]


def _build(generate_input: GenerateInput, wallet: object, **kwargs: object) -> SignedRequest:
    return asyncio.run(build_signed_request(generate_input, wallet, SNOWY_PROGRAM_ID, **kwargs))  # type: ignore[arg-type]


def test_signed_request_canonical_form_hash_and_signature() -> None:
    wallet = _wallet()
    request = _build(_input(), wallet)

    expected = (
        '{"maxTokens":16,"model":"snowy-base",'
        f'"programId":"{SNOWY_PROGRAM_ID}","prompt":"hi",'
        f'"signer":"{wallet.public_key_id}","temperature":0.2,"timestamp":1730000000000}}'
    )
    assert canonical_dumps(request.to_payload()) == expected
    assert request.request_hash == sha256_base58(expected.encode("utf-8"))
    assert verify_digest_signature(wallet.public_key_id, sha256(expected.encode("utf-8")), request.signature)
    assert len(base58.b58decode(request.signature)) == 64

    wire = request.to_wire()
    assert set(wire) == {
        "programId",
        "model",
        "prompt",
        "temperature",
        "maxTokens",
        "timestamp",
        "signer",
        "requestHash",
        "signature",
    }


def test_same_input_produces_same_request() -> None:
    wallet = _wallet()
    assert _build(_input(), wallet) == _build(_input(), wallet)


def test_timestamp_defaults_to_clock() -> None:
    request = _build(_input(timestamp=None), _wallet(), clock=lambda: 1234)
    assert request.timestamp == 1234


def test_integral_float_max_tokens_is_normalized() -> None:
    request = _build(_input(max_tokens=16.0), _wallet())
    assert request.max_tokens == 16
    assert b'"maxTokens":16,' in canonical_bytes(request.to_payload())


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"model": "gpt-4"}, "model"),
        ({"prompt": "   "}, "prompt"),
        ({"prompt": 42}, "prompt"),
        ({"temperature": float("nan")}, "temperature"),
        ({"temperature": True}, "temperature"),
        ({"temperature": "0.2"}, "temperature"),
        ({"max_tokens": 1.5}, "maxTokens"),
        ({"max_tokens": "16"}, "maxTokens"),
        ({"timestamp": float("inf")}, "timestamp"),
        ({"temperature": 10**400}, "temperature"),
        ({"temperature": 2**53 + 1}, "temperature"),
        ({"max_tokens": 10**400}, "maxTokens"),
        ({"max_tokens": 1e300}, "maxTokens"),
        ({"timestamp": 10**400}, "timestamp"),
        ({"timestamp": -(2**53)}, "timestamp"),
    ],
)
def test_invalid_input_fails_before_signing(overrides: dict[str, object], field: str) -> None:
    wallet = StubWallet(_wallet().public_key_id)

    with pytest.raises(InvalidInputError) as excinfo:
        _build(_input(**overrides), wallet)

    assert excinfo.value.field == field
    assert excinfo.value.category is ErrorCategory.INPUT
    assert wallet.calls == []


@pytest.mark.parametrize(
    "public_key_id",
    [encode_base58(bytes([7] * 31)), encode_base58(bytes([7] * 33)), "0OIl", ""],
)
def test_invalid_signer_fails_before_hashing_or_signing(public_key_id: str) -> None:
    wallet = StubWallet(public_key_id)

    with pytest.raises(InvalidSignerError):
        _build(_input(), wallet)

    assert wallet.calls == []


def test_short_signer_reports_decoded_length() -> None:
    with pytest.raises(InvalidSignerError) as excinfo:
        _build(_input(), StubWallet(encode_base58(bytes([7] * 31))))
    assert excinfo.value.decoded_length == 31


def test_wallet_signs_the_raw_digest() -> None:
    wallet = StubWallet(_wallet().public_key_id)
    request = _build(_input(), wallet)

    assert wallet.calls == [base58.b58decode(request.request_hash)]
    assert len(wallet.calls[0]) == 32


@pytest.mark.parametrize("length", [0, 63, 65])
def test_signature_length_must_be_64(length: int) -> None:
    wallet = StubWallet(_wallet().public_key_id, signature=b"\x02" * length)

    with pytest.raises(InvalidSignatureLengthError) as excinfo:
        _build(_input(), wallet)
    assert excinfo.value.length == length


def test_wallet_failure_becomes_signing_failed() -> None:
    boom = RuntimeError("user rejected the request")
    wallet = StubWallet(_wallet().public_key_id, error=boom)

    with pytest.raises(SigningFailedError) as excinfo:
        _build(_input(), wallet)

    assert excinfo.value.cause is boom
    assert excinfo.value.__cause__ is boom
    assert excinfo.value.category is ErrorCategory.SIGNING


def test_non_bytes_signature_is_a_signing_failure() -> None:
    wallet = StubWallet(_wallet().public_key_id, signature="not-bytes")
    with pytest.raises(SigningFailedError):
        _build(_input(), wallet)


def test_verify_signed_request_accepts_genuine_request() -> None:
    request = _build(_input(), _wallet())
    digest = verify_signed_request(request, expected_program_id=SNOWY_PROGRAM_ID)
    assert base58.b58decode(request.request_hash) == digest


def test_verify_signed_request_detects_tampering() -> None:
    request = _build(_input(), _wallet())

    with pytest.raises(RequestVerificationError) as excinfo:
        verify_signed_request(request.model_copy(update={"prompt": "bye"}))
    assert excinfo.value.field == "requestHash"


def test_verify_signed_request_checks_program_first() -> None:
    request = _build(_input(), _wallet())

    with pytest.raises(RequestVerificationError) as excinfo:
        verify_signed_request(request, expected_program_id="SomeOtherProgram")
    assert excinfo.value.field == "programId"


def test_verify_signed_request_rejects_foreign_signature() -> None:
    request = _build(_input(), _wallet())
    other = KeypairWallet.from_seed(bytes(32))
    forged = asyncio.run(other.sign(base58.b58decode(request.request_hash)))

    with pytest.raises(RequestVerificationError) as excinfo:
        verify_signed_request(request.model_copy(update={"signature": encode_base58(forged)}))
    assert excinfo.value.field == "signature"
