from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

DEFAULT_CORS_ORIGINS = "https://app.lauv.in,http://localhost:3000"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default), 'sqlite' or 'mongo'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - MONGO_URI: MongoDB connection string. Default 'mongodb://localhost:27017/tasks'
    - MONGO_DB_NAME: database used when the URI names none. Default 'tasks'
    - MONGO_TIMEOUT_MS: server selection timeout in milliseconds. Default 5000
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins, or '*'
    - HOST / PORT: bind address of the server. Default 127.0.0.1:5000
    - LOG_LEVEL: logging level name. Default 'INFO'
    """

    persistence_backend: str
    sqlite_db_path: str
    mongo_uri: str
    mongo_db_name: str
    mongo_timeout_ms: int
    cors_allow_origins: List[str]
    host: str
    port: int
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


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
    if backend not in {"memory", "sqlite", "mongo"}:
        # Fallback to memory if unsupported
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        mongo_uri=_get_env("MONGO_URI", "mongodb://localhost:27017/tasks").strip(),
        mongo_db_name=_get_env("MONGO_DB_NAME", "tasks").strip(),
        mongo_timeout_ms=_parse_int(_get_env("MONGO_TIMEOUT_MS", "5000"), 5000),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)),
        host=_get_env("HOST", "127.0.0.1").strip(),
        port=_parse_int(_get_env("PORT", "5000"), 5000),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
