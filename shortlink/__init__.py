"""Core business logic for the shortlink service."""

from .shortcode import ShortCodeGenerator
from .tokens import TokenKind, TokenService
from .auth_service import AuthService, LoginResult
from .url_service import URLShortenerService

__all__ = [
    "ShortCodeGenerator",
    "TokenKind",
    "TokenService",
    "AuthService",
    "LoginResult",
    "URLShortenerService",
]
