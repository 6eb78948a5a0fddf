from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projecthub.backends import Backend, build_backend
from projecthub.config import Settings, get_settings
from projecthub.errors import ApiError
from projecthub.routes import api_router, health_router

load_dotenv()

logger = logging.getLogger(__name__)

_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: list[str] = []
    missing_only = True
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        name = ".".join(location) or "body"
        if name not in fields:
            fields.append(name)
        if error.get("type") not in _MISSING_ERROR_TYPES:
            missing_only = False

    prefix = "Missing required fields" if missing_only else "Invalid request fields"
    return _error_response(status.HTTP_400_BAD_REQUEST, f"{prefix}: {', '.join(fields)}")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc) or "Internal server error",
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, backend: Backend | None = None) -> FastAPI:
    """Build the application.

    ``backend`` is built from ``settings`` at startup unless one is passed in.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_backend = backend is None
        app.state.backend = backend if backend is not None else await build_backend(settings)
        try:
            yield
        finally:
            if owns_backend:
                await app.state.backend.close()

    app = FastAPI(
        title="Project Hub Backend",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if backend is not None:
        app.state.backend = backend

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
    )

    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router)
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()
