"""Validation utilities for the shortlink service."""

import re
from urllib.parse import urlparse
from typing import Tuple

# RFC 3986 scheme: ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*$')
_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
# Characters never allowed unescaped anywhere in a URI
_FORBIDDEN_CHARS_RE = re.compile(r'[\s<>"{}|\\^`]')

MAX_URL_LENGTH = 2048
MAX_PASSWORD_BYTES = 72


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Check that ``url`` is a well-formed URI.

    A scheme is required and the remainder must be non-empty. Web URLs
    (http/https) must also name a host.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    if _FORBIDDEN_CHARS_RE.search(url):
        return False, "URL contains characters that must be escaped"

    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"

    if not result.scheme or not _SCHEME_RE.match(result.scheme) or ':' not in url:
        return False, "URL must start with a scheme (e.g. https:)"

    remainder = url.split(':', 1)[1]
    if not remainder:
        return False, "URL must have content after the scheme"

    if result.scheme.lower() in ("http", "https") and not result.hostname:
        return False, "URL must have a valid domain"

    return True, ""


def is_valid_email(email: str) -> Tuple[bool, str]:
    """Validate an email address used as a username."""
    if not email or not isinstance(email, str):
        return False, "Email is required"

    if len(email) > 254:
        return False, "Email is too long"

    if not _EMAIL_RE.match(email):
        return False, "Email address is not valid"

    return True, ""


def is_valid_password(password: str) -> Tuple[bool, str]:
    """Validate a new password. bcrypt only accepts up to 72 bytes."""
    if not password or not isinstance(password, str):
        return False, "Password is required"

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False, f"Password must be at most {MAX_PASSWORD_BYTES} bytes"

    return True, ""
