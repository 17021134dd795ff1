from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    # Persistence; empty means <project>/data
    data_dir: str

    # Debug
    debug_log_requests: bool
    debug_log_tokens: bool

    # HTTP
    cors_allow_origins: tuple[str, ...]


def get_settings() -> Settings:
    data_dir = os.getenv("DATUM_DATA_DIR", "").strip()

    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", True)
    # Tokens are bearer credentials; keep them out of logs unless asked.
    debug_log_tokens = _env_bool("DEBUG_LOG_TOKENS", False)

    cors_allow_origins = _env_list("CORS_ALLOW_ORIGINS", "*")

    return Settings(
        data_dir=data_dir,
        debug_log_requests=debug_log_requests,
        debug_log_tokens=debug_log_tokens,
        cors_allow_origins=cors_allow_origins,
    )
