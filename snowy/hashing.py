from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Protocol

import base58

from snowy.canonical import canonical_bytes
from snowy.constants import DIGEST_LENGTH
from snowy.errors import InvalidConfigError


class HashProvider(Protocol):
    name: str

    def digest(self, data: bytes) -> bytes: ...


class Sha256Provider:
    name = "sha256"

    def digest(self, data: bytes) -> bytes:
        return hashlib.sha256(data).digest()


DEFAULT_HASHER: HashProvider = Sha256Provider()


@dataclass(frozen=True)
class RequestDigest:
    digest: bytes
    base58: str


def sha256(data: bytes) -> bytes:
    return DEFAULT_HASHER.digest(data)


def sha256_base58(data: bytes) -> str:
    return base58.b58encode(sha256(data)).decode("ascii")


def digest_bytes(data: bytes, hasher: HashProvider = DEFAULT_HASHER) -> bytes:
    digest = hasher.digest(data)
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != DIGEST_LENGTH:
        raise InvalidConfigError(
            "hasher",
            f"{getattr(hasher, 'name', type(hasher).__name__)} must return {DIGEST_LENGTH} bytes",
        )
    return bytes(digest)


def hash_canonical(value: Any, hasher: HashProvider = DEFAULT_HASHER) -> RequestDigest:
    """Canonicalize ``value`` and hash it, returning raw and base58 forms."""
    digest = digest_bytes(canonical_bytes(value), hasher)
    return RequestDigest(digest=digest, base58=base58.b58encode(digest).decode("ascii"))
