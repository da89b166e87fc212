from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ApiError
from .logging_setup import setup_logging
from .repositories import Repository, build_repository
from .routers import system as system_router
from .routers import tasks as tasks_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and diagnostic endpoints."},
    {"name": "tasks", "description": "CRUD operations for Task items."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Fail fast when the store is unreachable, and release it on shutdown.
    """
    repo: Repository = app.state.repository
    try:
        repo.ping()
    except Exception:
        logger.error("store %s unreachable at startup", repo.driver)
        raise
    logger.info("%s store connected", repo.driver)
    try:
        yield
    finally:
        repo.close()


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The store handle is created here (or injected, for tests) and kept on
    `app.state.repository`; routes reach it through the `get_repository`
    dependency.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Task Tracker API",
        description="Backend API service for a minimal task tracker.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository if repository is not None else build_repository(settings)
    app.state.started_at = time.monotonic()

    # must be added before CORSMiddleware so 500 responses pass through it
    @app.middleware("http")
    async def catch_unhandled_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(status_code=500, content={"error": "internal error"})

    allow_all = settings.cors_allow_origins == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        """Render domain errors as {"error": "<message>"} with their status code."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for malformed request bodies.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": exc.errors(),
            },
        )

    app.include_router(system_router.router)
    app.include_router(tasks_router.router)
    return app


# PUBLIC_INTERFACE
def run() -> None:
    """Console entry point: configure logging and serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
