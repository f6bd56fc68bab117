from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_TOKEN_SECRET = "change-me-tasktrack-token-signing-secret"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Built once at startup and handed to create_app(); components receive it
    from app.state rather than reading the environment themselves.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasktrack.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - TOKEN_SECRET: HMAC key used to sign bearer tokens
    - TOKEN_TTL_SECONDS: bearer token lifetime in seconds (default: 3600)
    - BCRYPT_ROUNDS: bcrypt work factor for password digests (default: 10)
    - LOG_LEVEL: root log level name (default: INFO)
    """

    persistence_backend: str = "memory"
    sqlite_db_path: str = "./data/tasktrack.db"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    token_secret: str = DEFAULT_TOKEN_SECRET
    token_ttl_seconds: int = 3600
    bcrypt_rounds: int = 10
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int, lo: int, hi: int) -> int:
    try:
        n = int(value.strip())
    except ValueError:
        return default
    return min(max(n, lo), hi)


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasktrack.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        token_secret=_get_env("TOKEN_SECRET", DEFAULT_TOKEN_SECRET),
        token_ttl_seconds=_parse_int(_get_env("TOKEN_TTL_SECONDS", "3600"), 3600, 1, 30 * 24 * 3600),
        # bcrypt rejects cost factors outside 4..31
        bcrypt_rounds=_parse_int(_get_env("BCRYPT_ROUNDS", "10"), 10, 4, 31),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
