from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from snowy.signer import decode_base58, encode_base58


class KeypairWallet:
    """In-process Ed25519 wallet adapter, for tests, scripts and servers.

    Browser or hardware wallets implement the same two members and are used
    in its place.
    """

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key
        public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        self._public_key_id = encode_base58(public_bytes)

    @classmethod
    def generate(cls) -> "KeypairWallet":
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_seed(cls, seed: bytes) -> "KeypairWallet":
        if len(seed) != 32:
            raise ValueError("ed25519 signing key seed must be 32 bytes")
        return cls(Ed25519PrivateKey.from_private_bytes(seed))

    @classmethod
    def from_seed_base58(cls, seed_b58: str) -> "KeypairWallet":
        return cls.from_seed(decode_base58(seed_b58))

    @property
    def public_key_id(self) -> str:
        return self._public_key_id

    async def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message)
