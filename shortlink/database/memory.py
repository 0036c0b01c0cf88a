"""In-process store, used for ``memory://`` URLs and tests."""

import copy
import logging
from typing import Dict, List, Optional, Tuple

from .base import ShortlinkDBBase
from .models import ShortUrl, User


class InMemoryShortlinkDB(ShortlinkDBBase):
    """Dictionary-backed store.

    Operations never await, so each one runs to completion on the event loop
    without interleaving. Records are copied in and out so callers cannot
    mutate stored state by accident.
    """

    def __init__(self, db_config: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self._users: Dict[str, User] = {}
        self._short_urls: Dict[str, ShortUrl] = {}

    def _find_user(self, **criteria) -> Optional[User]:
        (name, value), = criteria.items()
        if value is None:
            return None
        for user in self._users.values():
            if getattr(user, name) == value:
                return copy.deepcopy(user)
        return None

    def _require_user(self, user_id: str) -> User:
        # Updates against missing users are silently ignored, like an UPDATE
        # matching zero rows
        return self._users.get(user_id)

    async def create_user(self, user: User) -> bool:
        if any(u.username == user.username for u in self._users.values()):
            return False
        self._users[user.id] = copy.deepcopy(user)
        self.logger.debug(f"Created user {user.id}")
        return True

    async def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return self._find_user(username=username)

    async def get_user_by_refresh_token(self, refresh_token: str) -> Optional[User]:
        return self._find_user(refresh_token=refresh_token or None)

    async def get_user_by_reset_token(self, reset_token: str) -> Optional[User]:
        return self._find_user(reset_token=reset_token or None)

    async def set_activation_token(self, user_id: str, token: Optional[str]) -> None:
        user = self._require_user(user_id)
        if user:
            user.activation_token = token

    async def mark_activated(self, user_id: str) -> None:
        user = self._require_user(user_id)
        if user:
            user.is_activated = True
            user.activation_token = None

    async def set_refresh_token(self, user_id: str, token: Optional[str]) -> None:
        user = self._require_user(user_id)
        if user:
            user.refresh_token = token

    async def set_reset_token(self, user_id: str, token: Optional[str]) -> None:
        user = self._require_user(user_id)
        if user:
            user.reset_token = token

    async def replace_password(self, user_id: str, password_hash: str) -> None:
        user = self._require_user(user_id)
        if user:
            user.password_hash = password_hash
            user.reset_token = None

    async def increment_url_counts(
        self,
        user_id: str,
        day_key: str,
        month_key: str,
    ) -> Optional[Tuple[int, int]]:
        user = self._require_user(user_id)
        if user is None:
            return None
        return user.daily_url_counts.increment(day_key), user.monthly_url_counts.increment(month_key)

    async def create_short_url(self, short_url: ShortUrl) -> bool:
        if short_url.url_id in self._short_urls:
            return False
        self._short_urls[short_url.url_id] = copy.deepcopy(short_url)
        return True

    async def find_short_url(self, user_id: str, orig_url: str) -> Optional[ShortUrl]:
        for record in self._short_urls.values():
            if record.user_id == user_id and record.orig_url == orig_url:
                return copy.deepcopy(record)
        return None

    async def short_code_exists(self, url_id: str) -> bool:
        return url_id in self._short_urls

    async def increment_visit_count(self, url_id: str) -> Optional[str]:
        record = self._short_urls.get(url_id)
        if record is None:
            return None
        record.count += 1
        return record.orig_url

    async def list_short_urls(self, user_id: str) -> List[ShortUrl]:
        records = [r for r in self._short_urls.values() if r.user_id == user_id]
        records.sort(key=lambda r: r.created_at)
        return [copy.deepcopy(r) for r in records]

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self.logger.debug("In-memory store closed")
