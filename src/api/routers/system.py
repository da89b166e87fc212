from __future__ import annotations

import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..deps import get_repository
from ..repositories import Repository
from ..schemas import HealthOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])

_ECHOED_HEADERS = ("host", "x-real-ip", "x-forwarded-for", "x-forwarded-proto")


# PUBLIC_INTERFACE
@router.get(
    "/health",
    response_model=HealthOut,
    summary="Health Check",
    responses={500: {"model": HealthOut, "description": "Store did not answer the ping"}},
)
def health_check(request: Request, repo: Repository = Depends(get_repository)) -> JSONResponse:
    """
    Ping the store and report the driver name and process uptime in seconds.
    """
    uptime = time.monotonic() - request.app.state.started_at
    try:
        repo.ping()
    except Exception:
        logger.warning("store ping failed", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "driver": repo.driver, "uptime": uptime},
        )
    return JSONResponse(content={"ok": True, "driver": repo.driver, "uptime": uptime})


# PUBLIC_INTERFACE
@router.get("/debug", summary="Request Echo")
def debug_echo(request: Request) -> Dict[str, Any]:
    """Echo the caller's address and the proxy-related request headers."""
    return {
        "ip": request.client.host if request.client else None,
        "headers": {name: request.headers.get(name) for name in _ECHOED_HEADERS},
    }
