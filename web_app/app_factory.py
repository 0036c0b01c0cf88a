"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortlink.errors import ShortlinkError
from .api import api_router
from .web import web_router
from .middleware.logging import LoggingMiddleware


logger = logging.getLogger("shortlink.web")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain errors into ``{"error": message}`` responses."""

    @app.exception_handler(ShortlinkError)
    async def shortlink_error_handler(request: Request, exc: ShortlinkError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    db_instance,
    auth_service,
    url_service,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        db_instance: Database instance
        auth_service: Account workflow service
        url_service: URL shortening service
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Shortlink",
        description="Accounts and rate-limited URL shortening",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Store instances in app state for access in routes
    app.state.db = db_instance
    app.state.auth_service = auth_service
    app.state.url_service = url_service
    app.state.config = config

    # Credentialed requests need explicit origins, not "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")
    app.include_router(web_router, tags=["Web"])

    return app
