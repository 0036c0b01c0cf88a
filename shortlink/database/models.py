"""Data models for the shortlink service."""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..counters import PeriodCounts


def new_id() -> str:
    """Generate an opaque record id."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _load_counts(value: Any) -> PeriodCounts:
    # asyncpg returns JSONB as text unless a codec is registered
    if isinstance(value, str):
        value = json.loads(value) if value else {}
    return PeriodCounts.from_mapping(value)


@dataclass
class User:
    """A registered account."""

    first_name: str
    last_name: str
    username: str
    password_hash: str
    id: str = field(default_factory=new_id)
    is_activated: bool = False
    activation_token: Optional[str] = None
    refresh_token: Optional[str] = None
    reset_token: Optional[str] = None
    daily_url_counts: PeriodCounts = field(default_factory=PeriodCounts)
    monthly_url_counts: PeriodCounts = field(default_factory=PeriodCounts)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        """Public representation. Never includes the password hash or tokens."""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "username": self.username,
            "is_activated": self.is_activated,
            "daily_url_counts": dict(self.daily_url_counts),
            "monthly_url_counts": dict(self.monthly_url_counts),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "User":
        """Create from a database row or dictionary."""
        return cls(
            id=data["id"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            username=data["username"],
            password_hash=data["password_hash"],
            is_activated=bool(data.get("is_activated", False)),
            activation_token=data.get("activation_token"),
            refresh_token=data.get("refresh_token"),
            reset_token=data.get("reset_token"),
            daily_url_counts=_load_counts(data.get("daily_url_counts")),
            monthly_url_counts=_load_counts(data.get("monthly_url_counts")),
            created_at=data.get("created_at") or utcnow(),
        )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r}, is_activated={self.is_activated})"


@dataclass
class ShortUrl:
    """A short code owned by a user, mapping to an original URL."""

    user_id: str
    orig_url: str
    url_id: str
    short_url: str
    count: int = 0
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "orig_url": self.orig_url,
            "url_id": self.url_id,
            "short_url": self.short_url,
            "count": self.count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "ShortUrl":
        """Create from a database row or dictionary."""
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            orig_url=data["orig_url"],
            url_id=data["url_id"],
            short_url=data["short_url"],
            count=int(data.get("count") or 0),
            created_at=data.get("created_at") or utcnow(),
        )
