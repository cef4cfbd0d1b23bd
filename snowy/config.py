from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlsplit

import httpx

from snowy.constants import DIGEST_LENGTH, SNOWY_NETWORKS, SNOWY_PROGRAM_ID
from snowy.errors import InvalidConfigError
from snowy.hashing import DEFAULT_HASHER, HashProvider


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class SnowyClientConfig:
    """Fixed configuration of a :class:`~snowy.client.SnowyClient`.

    ``endpoint`` is the full URL of the router's JSON POST route.
    ``program_id`` is embedded into (and therefore bound by) every request
    hash and defaults to the mainnet SNOWY program. ``timeout_ms`` bounds the
    network call only, never the wallet signature; ``None`` means no timeout.
    ``http_client`` / ``http_transport`` replace the default network layer.
    """

    endpoint: str
    network: str = "mainnet-beta"
    program_id: str = SNOWY_PROGRAM_ID
    timeout_ms: float | None = None
    hasher: HashProvider = field(default=DEFAULT_HASHER)
    http_client: httpx.AsyncClient | None = None
    http_transport: httpx.AsyncBaseTransport | None = None


def validate_client_config(config: SnowyClientConfig) -> None:
    if not isinstance(config.endpoint, str) or not config.endpoint.strip():
        raise InvalidConfigError("endpoint", "must be a non-empty string")
    parts = urlsplit(config.endpoint)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise InvalidConfigError("endpoint", "must be an absolute http(s) URL")
    if config.network not in SNOWY_NETWORKS:
        raise InvalidConfigError("network", f"must be one of {', '.join(SNOWY_NETWORKS)}")
    if not isinstance(config.program_id, str) or not config.program_id.strip():
        raise InvalidConfigError("program_id", "must be a non-empty string")
    if config.timeout_ms is not None and (
        isinstance(config.timeout_ms, bool) or not isinstance(config.timeout_ms, (int, float)) or config.timeout_ms <= 0
    ):
        raise InvalidConfigError("timeout_ms", "must be a positive number of milliseconds")
    if config.http_client is not None and config.http_transport is not None:
        raise InvalidConfigError("http_transport", "cannot be combined with http_client")

    sample = config.hasher.digest(b"")
    if not isinstance(sample, (bytes, bytearray)) or len(sample) != DIGEST_LENGTH:
        raise InvalidConfigError("hasher", f"must produce {DIGEST_LENGTH}-byte digests")


def load_client_config() -> SnowyClientConfig:
    return SnowyClientConfig(
        endpoint=os.getenv("SNOWY_ENDPOINT", "http://localhost:8000/v1/generate"),
        network=os.getenv("SNOWY_NETWORK", "mainnet-beta"),
        program_id=os.getenv("SNOWY_PROGRAM_ID", "").strip() or SNOWY_PROGRAM_ID,
        timeout_ms=_env_float("SNOWY_TIMEOUT_MS", None),
    )
