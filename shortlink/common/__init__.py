"""Common utilities for the shortlink service."""

from .validators import is_valid_url, is_valid_email, is_valid_password
from .url_builder import build_short_url, build_client_link
from .logging_config import setup_logging, mask_token

__all__ = [
    "is_valid_url",
    "is_valid_email",
    "is_valid_password",
    "build_short_url",
    "build_client_link",
    "setup_logging",
    "mask_token",
]
