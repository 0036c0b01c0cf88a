"""Signed, expiring tokens for activation, access, refresh and password reset."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional

import jwt

from .errors import InvalidOrExpiredToken


class TokenKind(str, Enum):
    """Kinds of token issued by the service. Each kind has its own secret."""

    ACTIVATION = "activation"
    ACCESS = "access"
    REFRESH = "refresh"
    RESET = "reset"


DEFAULT_LIFETIMES = {
    TokenKind.ACTIVATION: timedelta(hours=1),
    TokenKind.ACCESS: timedelta(minutes=15),
    TokenKind.REFRESH: timedelta(days=1),
    TokenKind.RESET: timedelta(hours=1),
}


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims of a token."""

    subject: str
    kind: TokenKind
    expires_at: datetime


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of verifying a token: either claims or a failure reason."""

    claims: Optional[TokenClaims] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.claims is not None

    @classmethod
    def success(cls, claims: TokenClaims) -> "VerifyResult":
        return cls(claims=claims)

    @classmethod
    def failure(cls, reason: str) -> "VerifyResult":
        return cls(error=reason)

    def unwrap(self) -> TokenClaims:
        """Return the claims or raise ``InvalidOrExpiredToken``."""
        if self.claims is None:
            raise InvalidOrExpiredToken()
        return self.claims


def decode_token(
    token: str,
    secret: str,
    algorithm: str = "HS256",
    now: Optional[datetime] = None,
) -> VerifyResult:
    """Verify signature and expiry of a token against one secret.

    Expiry is compared with ``now`` (default: current UTC time) instead of
    PyJWT's wall clock, so a service with an injected clock issues and
    verifies on the same timeline.
    """
    if not token:
        return VerifyResult.failure("missing token")
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "sub"], "verify_exp": False, "verify_iat": False},
        )
    except jwt.InvalidTokenError as e:
        return VerifyResult.failure(f"invalid token: {e}")

    try:
        kind = TokenKind(payload.get("type"))
    except ValueError:
        return VerifyResult.failure("unknown token type")

    try:
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return VerifyResult.failure("invalid token: malformed exp claim")

    if expires_at <= (now or datetime.now(timezone.utc)):
        return VerifyResult.failure("token expired")

    return VerifyResult.success(TokenClaims(subject=str(payload["sub"]), kind=kind, expires_at=expires_at))


class TokenService:
    """Issue and verify tokens, one signing secret per token kind."""

    def __init__(
        self,
        secrets: Dict[TokenKind, str],
        lifetimes: Optional[Dict[TokenKind, timedelta]] = None,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize token service.

        Args:
            secrets: Signing secret for every token kind
            lifetimes: Optional lifetime overrides per kind
            algorithm: JWT algorithm
            clock: Optional callable returning the current UTC time
            logger: Optional logger
        """
        missing = [kind.value for kind in TokenKind if not secrets.get(kind)]
        if missing:
            raise ValueError(f"Missing token secrets for: {', '.join(missing)}")

        self.secrets = dict(secrets)
        self.lifetimes = {**DEFAULT_LIFETIMES, **(lifetimes or {})}
        self.algorithm = algorithm
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config, logger: Optional[logging.Logger] = None) -> "TokenService":
        """Build a token service from application configuration."""
        return cls(
            secrets={
                TokenKind.ACTIVATION: config.activation_token_secret,
                TokenKind.ACCESS: config.access_token_secret,
                TokenKind.REFRESH: config.refresh_token_secret,
                TokenKind.RESET: config.reset_password_secret,
            },
            lifetimes={
                TokenKind.ACTIVATION: timedelta(minutes=config.activation_token_minutes),
                TokenKind.ACCESS: timedelta(minutes=config.access_token_minutes),
                TokenKind.REFRESH: timedelta(minutes=config.refresh_token_minutes),
                TokenKind.RESET: timedelta(minutes=config.reset_token_minutes),
            },
            algorithm=config.token_algorithm,
            logger=logger,
        )

    def issue(self, kind: TokenKind, subject: str) -> str:
        """Issue a signed token of ``kind`` for ``subject``."""
        now = self.clock()
        payload = {
            "sub": str(subject),
            "type": kind.value,
            "iat": now,
            "exp": now + self.lifetimes[kind],
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.secrets[kind], algorithm=self.algorithm)

    def verify(self, token: str, kind: TokenKind) -> VerifyResult:
        """Verify a token of ``kind``; never raises."""
        result = decode_token(token, self.secrets[kind], self.algorithm, now=self.clock())
        if result.ok and result.claims.kind != kind:
            result = VerifyResult.failure(
                f"wrong token type: expected {kind.value}, got {result.claims.kind.value}"
            )
        if not result.ok:
            self.logger.debug(f"{kind.value} token rejected: {result.error}")
        return result

    def lifetime(self, kind: TokenKind) -> timedelta:
        return self.lifetimes[kind]
