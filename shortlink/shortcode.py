"""Short code allocation for short URLs."""

import secrets
import string
import uuid
from typing import Optional


# URL-safe alphabet (RFC 4648 section 5): letters, digits, '-' and '_'
URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "-_"

DEFAULT_CODE_LENGTH = 8


class ShortCodeGenerator:
    """Generate short codes for URLs.

    Codes are drawn from a cryptographic RNG so they cannot be guessed from
    earlier ones. Uniqueness is checked by the caller against the store.
    """

    def __init__(self, default_length: int = DEFAULT_CODE_LENGTH):
        """Initialize short code generator.

        Args:
            default_length: Length of generated codes
        """
        if default_length < 1:
            raise ValueError("Short code length must be positive")
        self.default_length = default_length

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return "".join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(length))

    def generate_from_uuid(self, length: Optional[int] = None) -> str:
        """Short code from the low bits of a fresh UUID4.

        Used once random draws keep colliding. Each character consumes six
        bits of the UUID.
        """
        length = length or self.default_length
        value = uuid.uuid4().int
        chars = []
        for _ in range(length):
            value, index = divmod(value, len(URL_SAFE_ALPHABET))
            chars.append(URL_SAFE_ALPHABET[index])
        return "".join(chars)

    @staticmethod
    def is_valid_format(code: str, length: Optional[int] = None) -> bool:
        """Check that code uses only URL-safe characters (and has ``length``, if given)."""
        if not code:
            return False
        if length is not None and len(code) != length:
            return False
        return all(c in URL_SAFE_ALPHABET for c in code)
