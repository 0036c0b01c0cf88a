"""Business logic service for rate-limited URL shortening."""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from .common.url_builder import build_short_url
from .common.validators import is_valid_url
from .counters import period_keys
from .database.base import ShortlinkDBBase
from .database.models import ShortUrl, User
from .errors import (
    DailyLimitExceeded,
    InternalError,
    InvalidURL,
    MonthlyLimitExceeded,
    ShortUrlNotFound,
    UserNotFound,
)
from .shortcode import ShortCodeGenerator


class URLShortenerService:
    """Service layer for URL shortening business logic."""

    def __init__(
        self,
        db: ShortlinkDBBase,
        base_url: str,
        daily_limit: int,
        monthly_limit: int,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize URL shortener service.

        Args:
            db: Database instance
            base_url: Prefix of every generated short URL
            daily_limit: Maximum URLs per user per day
            monthly_limit: Maximum URLs per user per month
            short_code_generator: Optional short code generator
            logger: Optional logger
            max_collision_retries: Maximum retries on collision
            clock: Optional callable returning the current UTC time
        """
        self.db = db
        self.base_url = base_url
        self.daily_limit = daily_limit
        self.monthly_limit = monthly_limit
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_config(
        cls,
        db: ShortlinkDBBase,
        config,
        logger: Optional[logging.Logger] = None,
    ) -> "URLShortenerService":
        """Build the service from application configuration."""
        return cls(
            db=db,
            base_url=config.base_url,
            daily_limit=config.daily_limit,
            monthly_limit=config.monthly_limit,
            short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
            logger=logger,
            max_collision_retries=config.max_collision_retries,
        )

    async def shorten(self, orig_url: str, user_id: str) -> Tuple[ShortUrl, bool]:
        """Create (or return the existing) short URL for a user.

        Both period counters are incremented in one atomic store update
        before the limits are checked, and the increment stands even when the
        request is rejected or the URL was already shortened.

        Args:
            orig_url: The original long URL
            user_id: Owner of the short URL

        Returns:
            Tuple of (short URL record, created) where created is False for
            an existing record

        Raises:
            InvalidURL: If orig_url is not a well-formed URI
            UserNotFound: If the user does not exist
            DailyLimitExceeded: If today's count is above the daily limit
            MonthlyLimitExceeded: If this month's count is above the monthly limit
        """
        is_valid, error = is_valid_url(orig_url)
        if not is_valid:
            self.logger.debug(f"Rejected URL {orig_url!r}: {error}")
            raise InvalidURL()

        today, this_month = period_keys(self.clock())
        counts = await self.db.increment_url_counts(user_id, today, this_month)
        if counts is None:
            raise UserNotFound()
        daily_count, monthly_count = counts

        if daily_count > self.daily_limit:
            self.logger.info(f"User {user_id} over daily limit ({daily_count}/{self.daily_limit})")
            raise DailyLimitExceeded()

        if monthly_count > self.monthly_limit:
            self.logger.info(f"User {user_id} over monthly limit ({monthly_count}/{self.monthly_limit})")
            raise MonthlyLimitExceeded()

        # Read-then-write: concurrent identical requests can both get here
        existing = await self.db.find_short_url(user_id, orig_url)
        if existing:
            return existing, False

        record = await self._create_record(user_id, orig_url)
        return record, True

    async def redirect(self, url_id: str) -> str:
        """Count a visit and return the original URL for a short code.

        Raises:
            ShortUrlNotFound: If the code does not exist
        """
        if not ShortCodeGenerator.is_valid_format(url_id):
            self.logger.debug(f"Malformed short code: {url_id!r}")
            raise ShortUrlNotFound()

        # Lookup and increment happen in one store operation
        orig_url = await self.db.increment_visit_count(url_id)

        if orig_url is None:
            self.logger.warning(f"Short code not found: {url_id}")
            raise ShortUrlNotFound()

        self.logger.debug(f"Redirect: {url_id} -> {orig_url}")
        return orig_url

    async def dashboard(self, user_id: str) -> User:
        """Profile and counters of a user.

        Raises:
            UserNotFound: If the user does not exist
        """
        user = await self.db.get_user(user_id)
        if user is None:
            raise UserNotFound()
        return user

    async def list_urls(self, user_id: str) -> List[ShortUrl]:
        """All short URLs a user has created."""
        return await self.db.list_short_urls(user_id)

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check()

        return {
            "database": db_healthy,
            "overall": db_healthy,
        }

    async def _create_record(self, user_id: str, orig_url: str) -> ShortUrl:
        """Allocate a unique code and insert the short URL.

        A lost race on the code itself (unique in the store) is retried with
        a fresh code.
        """
        for _ in range(self.max_collision_retries):
            url_id = await self._generate_unique_short_code()
            record = ShortUrl(
                user_id=user_id,
                orig_url=orig_url,
                url_id=url_id,
                short_url=build_short_url(url_id, self.base_url),
                created_at=self.clock(),
            )
            if await self.db.create_short_url(record):
                self.logger.info(f"Created short URL: {url_id} -> {orig_url}")
                return record

        raise InternalError("Failed to create short URL")

    async def _generate_unique_short_code(self) -> str:
        """Generate a unique short code with collision handling.

        Raises:
            InternalError: If unable to generate unique code after retries
        """
        for attempt in range(self.max_collision_retries):
            code = self.generator.generate_random()

            if not await self.db.short_code_exists(code):
                if attempt:
                    self.logger.debug(f"Generated code after {attempt + 1} attempts: {code}")
                return code

        # Last resort: UUID-based code
        code = self.generator.generate_from_uuid()

        if not await self.db.short_code_exists(code):
            return code

        raise InternalError("Unable to generate unique short code after multiple attempts")

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
