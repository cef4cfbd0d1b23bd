from __future__ import annotations

import os
from dataclasses import dataclass

from snowy.constants import SNOWY_PROGRAM_ID


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class RouterSettings:
    service_name: str
    log_level: str
    program_id: str
    mock_token_delay_seconds: float
    host: str = "0.0.0.0"
    port: int = 8000


def load_settings() -> RouterSettings:
    return RouterSettings(
        service_name=os.getenv("ROUTER_SERVICE_NAME", "router"),
        log_level=os.getenv("ROUTER_LOG_LEVEL", "INFO"),
        program_id=os.getenv("SNOWY_PROGRAM_ID", "").strip() or SNOWY_PROGRAM_ID,
        mock_token_delay_seconds=_env_float("MOCK_TOKEN_DELAY_SECONDS", 0.0),
        host=os.getenv("ROUTER_HOST", "0.0.0.0"),
        port=_env_int("ROUTER_PORT", 8000),
    )
