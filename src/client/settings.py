from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClientSettings:
    """
    Client settings loaded from environment variables.

    Env vars:
    - TASKS_API_BASE: base URL of the API server. Default 'http://localhost:5000'
    - TASKS_HTTP_TIMEOUT: request timeout in seconds. Default 10
    - TASKS_CLIENT_LOG_DIR: directory for a debug log file. Unset means console only
    """

    api_base: str
    http_timeout_seconds: float
    log_dir: Optional[str] = None

    @property
    def api_url(self) -> str:
        """Root of the API routes, i.e. '<base>/api'."""
        return f"{self.api_base.rstrip('/')}/api"


# PUBLIC_INTERFACE
def get_client_settings() -> ClientSettings:
    """Return client settings loaded from environment variables."""
    base = os.getenv("TASKS_API_BASE") or "http://localhost:5000"
    try:
        timeout = float(os.getenv("TASKS_HTTP_TIMEOUT") or "10")
    except ValueError:
        timeout = 10.0
    return ClientSettings(
        api_base=base.strip(),
        http_timeout_seconds=timeout,
        log_dir=(os.getenv("TASKS_CLIENT_LOG_DIR") or "").strip() or None,
    )
