from __future__ import annotations

from typing import Protocol, runtime_checkable

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from snowy.constants import DIGEST_LENGTH, PUBLIC_KEY_LENGTH, SIGNATURE_LENGTH
from snowy.errors import (
    InvalidSignatureLengthError,
    InvalidSignerError,
    SigningFailedError,
)


@runtime_checkable
class WalletIdentity(Protocol):
    """Signing capability supplied by a wallet adapter.

    ``public_key_id`` is the base58 text of a 32-byte Ed25519 public key and
    ``sign`` returns a 64-byte signature over the bytes it is given. The key
    material never crosses this boundary.
    """

    @property
    def public_key_id(self) -> str: ...

    async def sign(self, message: bytes) -> bytes: ...


def decode_base58(text: str) -> bytes:
    if not isinstance(text, str) or not text:
        raise ValueError("expected a non-empty base58 string")
    try:
        return base58.b58decode(text)
    except ValueError as exc:
        raise ValueError(f"invalid base58 string: {exc}") from exc


def encode_base58(data: bytes) -> str:
    return base58.b58encode(data).decode("ascii")


def ensure_base58_public_key(public_key_id: object) -> bytes:
    if not isinstance(public_key_id, str):
        raise InvalidSignerError("must be a base58 string")
    try:
        decoded = decode_base58(public_key_id)
    except ValueError as exc:
        raise InvalidSignerError("must be a valid base58 string") from exc
    if len(decoded) != PUBLIC_KEY_LENGTH:
        raise InvalidSignerError(
            f"must decode to {PUBLIC_KEY_LENGTH} bytes (got {len(decoded)})",
            decoded_length=len(decoded),
        )
    return decoded


async def sign_digest(wallet: WalletIdentity, digest: bytes) -> str:
    """Have ``wallet`` sign a 32-byte digest and return the base58 signature.

    The wallet call is the one externally controlled suspension point of
    request construction. Once awaited it runs to completion or failure; it
    is not interrupted by the SDK's cancellation token.
    """
    ensure_base58_public_key(wallet.public_key_id)
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != DIGEST_LENGTH:
        raise SigningFailedError(f"expected a {DIGEST_LENGTH}-byte hash to sign")

    try:
        signature = await wallet.sign(bytes(digest))
    except Exception as exc:
        raise SigningFailedError(str(exc) or type(exc).__name__, cause=exc) from exc

    if not isinstance(signature, (bytes, bytearray)):
        raise SigningFailedError(f"wallet.sign must return bytes (got {type(signature).__name__})")
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureLengthError(len(signature))
    return encode_base58(bytes(signature))


def verify_digest_signature(public_key_id: str, digest: bytes, signature_b58: str) -> bool:
    """Check an Ed25519 signature over ``digest``; False on any malformed input."""
    try:
        public_key = Ed25519PublicKey.from_public_bytes(ensure_base58_public_key(public_key_id))
        signature = decode_base58(signature_b58)
    except (InvalidSignerError, ValueError):
        return False
    if len(signature) != SIGNATURE_LENGTH:
        return False
    try:
        public_key.verify(signature, digest)
    except InvalidSignature:
        return False
    return True
