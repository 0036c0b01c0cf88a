"""Logging middleware."""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging.

    Paths are logged without the query string, and activation or reset
    tokens in the path are shortened so they never reach the log in full.
    """

    TOKEN_PATH_PREFIXES = ("/api/auth/activation/", "/api/auth/reset-password/")

    def __init__(self, app, logger: logging.Logger = None):
        """Initialize logging middleware."""
        super().__init__(app)
        self.logger = logger or logging.getLogger("shortlink.web")

    def _loggable_path(self, path: str) -> str:
        for prefix in self.TOKEN_PATH_PREFIXES:
            if path.startswith(prefix):
                return prefix + path[len(prefix):][:6] + "..."
        return path

    async def dispatch(self, request: Request, call_next: Callable):
        """Log request and response."""
        start_time = time.time()
        path = self._loggable_path(request.url.path)

        client_ip = request.client.host if request.client else "unknown"
        self.logger.info(f"Request: {request.method} {path} from {client_ip}")

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000

        self.logger.info(
            f"Response: {request.method} {path} - "
            f"Status: {response.status_code} - Duration: {duration_ms:.2f}ms"
        )

        return response
