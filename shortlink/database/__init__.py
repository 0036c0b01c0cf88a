"""Storage layer for the shortlink service."""

import logging
from typing import Optional
from urllib.parse import urlparse

from .base import ShortlinkDBBase
from .memory import InMemoryShortlinkDB
from .postgres import ShortlinkPostgresDB
from .models import ShortUrl, User


def create_database(database_url: str, logger: Optional[logging.Logger] = None) -> ShortlinkDBBase:
    """Pick a store implementation from the URL scheme."""
    scheme = urlparse(database_url).scheme.lower()
    if scheme == "memory":
        return InMemoryShortlinkDB(database_url, logger=logger)
    if scheme in ("postgres", "postgresql"):
        return ShortlinkPostgresDB(database_url, logger=logger)
    raise ValueError(f"Unsupported database URL scheme: {scheme or database_url!r}")


__all__ = [
    "ShortlinkDBBase",
    "InMemoryShortlinkDB",
    "ShortlinkPostgresDB",
    "ShortUrl",
    "User",
    "create_database",
]
