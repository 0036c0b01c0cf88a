"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, List, Tuple

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from shortlink.auth_service import AuthService
from shortlink.common.logging_config import setup_logging
from shortlink.database.memory import InMemoryShortlinkDB
from shortlink.database.models import User
from shortlink.notifier import ACTIVATION_SUBJECT, RESET_SUBJECT, EmailNotifier
from shortlink.passwords import hash_password
from shortlink.shortcode import ShortCodeGenerator
from shortlink.tokens import TokenKind, TokenService
from shortlink.url_service import URLShortenerService
from web_app import create_app


TEST_BASE_URL = "http://sho.rt"
TEST_CLIENT_URL = "http://client.test"
TEST_DAILY_LIMIT = 3
TEST_MONTHLY_LIMIT = 5
# Lowest cost bcrypt accepts; keeps the suite fast
TEST_BCRYPT_ROUNDS = 4

TEST_SECRETS = {
    TokenKind.ACTIVATION: "test-activation-secret",
    TokenKind.ACCESS: "test-access-secret",
    TokenKind.REFRESH: "test-refresh-secret",
    TokenKind.RESET: "test-reset-secret",
}


class MutableClock:
    """Callable clock whose time tests can move."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RecordingNotifier(EmailNotifier):
    """Captures outgoing mail instead of sending it."""

    def __init__(self, client_url: str = TEST_CLIENT_URL):
        super().__init__(client_url)
        self.sent: List[Tuple[str, str, str]] = []

    async def send(self, to_address: str, subject: str, html_body: str, link: str) -> None:
        self.sent.append((to_address, subject, link))

    def _last_token(self, to_address: str, subject: str) -> str:
        for address, sent_subject, link in reversed(self.sent):
            if address == to_address and sent_subject == subject:
                return link.rsplit("/", 1)[-1]
        raise AssertionError(f"No '{subject}' mail sent to {to_address}")

    def activation_token_for(self, to_address: str) -> str:
        return self._last_token(to_address, ACTIVATION_SUBJECT)

    def reset_token_for(self, to_address: str) -> str:
        return self._last_token(to_address, RESET_SUBJECT)


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    """Clock shared by the token and URL services, starting at the real time."""
    return MutableClock(datetime.now(timezone.utc))


@pytest.fixture
def test_db(logger) -> InMemoryShortlinkDB:
    """Create test database instance."""
    return InMemoryShortlinkDB(logger=logger)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def token_service(clock, logger) -> TokenService:
    return TokenService(secrets=TEST_SECRETS, clock=clock, logger=logger)


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=8)


@pytest.fixture
def auth_service(test_db, token_service, notifier, logger) -> AuthService:
    return AuthService(
        db=test_db,
        tokens=token_service,
        notifier=notifier,
        logger=logger,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
    )


@pytest.fixture
def url_service(test_db, short_code_generator, clock, logger) -> URLShortenerService:
    return URLShortenerService(
        db=test_db,
        base_url=TEST_BASE_URL,
        daily_limit=TEST_DAILY_LIMIT,
        monthly_limit=TEST_MONTHLY_LIMIT,
        short_code_generator=short_code_generator,
        logger=logger,
        clock=clock,
    )


@pytest.fixture
async def active_user(test_db) -> User:
    """An activated user stored directly, bypassing signup."""
    user = User(
        first_name="Ada",
        last_name="Lovelace",
        username="ada@example.com",
        password_hash=hash_password("analytical-engine", TEST_BCRYPT_ROUNDS),
        is_activated=True,
    )
    await test_db.create_user(user)
    return user


@pytest.fixture
def test_config() -> Config:
    return Config(
        _env_file=None,
        database_url="memory://",
        base_url=TEST_BASE_URL,
        client_url=TEST_CLIENT_URL,
        daily_limit=TEST_DAILY_LIMIT,
        monthly_limit=TEST_MONTHLY_LIMIT,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        cors_origins=[TEST_CLIENT_URL],
    )


@pytest.fixture
def app(test_db, auth_service, url_service, test_config):
    """Create test FastAPI app."""
    return create_app(
        db_instance=test_db,
        auth_service=auth_service,
        url_service=url_service,
        config=test_config,
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test client.

    https so the Secure refresh cookie is sent back on later requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://testserver") as ac:
        yield ac
