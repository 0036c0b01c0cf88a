"""Abstract base class for shortlink store implementations."""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .models import ShortUrl, User


class ShortlinkDBBase(ABC):
    """Abstract base class for user and short URL persistence.

    Each method is one short unit of work; implementations rely on the
    store's per-row atomicity and take no locks.
    """

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Database connection string
        """
        self.db_config = db_config

    async def ensure_tables(self) -> None:
        """Create the schema if the backend needs one."""

    # Users

    @abstractmethod
    async def create_user(self, user: User) -> bool:
        """Insert a new user.

        Returns:
            True if created, False if the username is already taken
        """
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        """Get a user by id."""
        pass

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username (email)."""
        pass

    @abstractmethod
    async def get_user_by_refresh_token(self, refresh_token: str) -> Optional[User]:
        """Get the user whose stored refresh token equals ``refresh_token``."""
        pass

    @abstractmethod
    async def get_user_by_reset_token(self, reset_token: str) -> Optional[User]:
        """Get the user whose stored reset token equals ``reset_token``."""
        pass

    @abstractmethod
    async def set_activation_token(self, user_id: str, token: Optional[str]) -> None:
        """Store (overwrite) the user's activation token."""
        pass

    @abstractmethod
    async def mark_activated(self, user_id: str) -> None:
        """Set the user active and clear the activation token."""
        pass

    @abstractmethod
    async def set_refresh_token(self, user_id: str, token: Optional[str]) -> None:
        """Store (overwrite) or clear the user's refresh token."""
        pass

    @abstractmethod
    async def set_reset_token(self, user_id: str, token: Optional[str]) -> None:
        """Store (overwrite) or clear the user's password reset token."""
        pass

    @abstractmethod
    async def replace_password(self, user_id: str, password_hash: str) -> None:
        """Store a new password hash and clear the reset token."""
        pass

    @abstractmethod
    async def increment_url_counts(
        self,
        user_id: str,
        day_key: str,
        month_key: str,
    ) -> Optional[Tuple[int, int]]:
        """Add one to the user's counters for ``day_key`` and ``month_key``.

        Must be a single atomic update: concurrent calls for one user each
        see a distinct result.

        Returns:
            The new (daily, monthly) counts, or None if the user does not exist
        """
        pass

    # Short URLs

    @abstractmethod
    async def create_short_url(self, short_url: ShortUrl) -> bool:
        """Insert a short URL.

        Returns:
            True if created, False if the short code is already taken
        """
        pass

    @abstractmethod
    async def find_short_url(self, user_id: str, orig_url: str) -> Optional[ShortUrl]:
        """Find the user's existing short URL for ``orig_url``."""
        pass

    @abstractmethod
    async def short_code_exists(self, url_id: str) -> bool:
        """Check if a short code is already taken."""
        pass

    @abstractmethod
    async def increment_visit_count(self, url_id: str) -> Optional[str]:
        """Add one to the visit count of a short code.

        Returns:
            The original URL, or None if the code does not exist
        """
        pass

    @abstractmethod
    async def list_short_urls(self, user_id: str) -> List[ShortUrl]:
        """List a user's short URLs, oldest first."""
        pass

    # Lifecycle

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass
