"""Account lifecycle: signup, activation, login sessions and password reset."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .common.logging_config import mask_token
from .common.validators import is_valid_email, is_valid_password
from .database.base import ShortlinkDBBase
from .database.models import User
from .errors import (
    AlreadyActivated,
    DuplicateUser,
    Forbidden,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidToken,
    MissingCredentials,
    NotActivated,
    Unauthorized,
    UserNotFound,
    ValidationError,
)
from .notifier import EmailNotifier
from .passwords import DEFAULT_ROUNDS, hash_password, verify_password
from .tokens import TokenKind, TokenService


@dataclass(frozen=True)
class LoginResult:
    """Tokens handed out by a successful login."""

    access_token: str
    refresh_token: str
    user_id: str


class AuthService:
    """Service layer for the account state machine.

    A user moves Unregistered -> Registered (inactive) -> Active. Every
    token stored on the user record holds a single active value; issuing a
    new one invalidates the previous one.
    """

    def __init__(
        self,
        db: ShortlinkDBBase,
        tokens: TokenService,
        notifier: EmailNotifier,
        logger: Optional[logging.Logger] = None,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ):
        """Initialize auth service.

        Args:
            db: Store for user records
            tokens: Token issuer/verifier
            notifier: Outbound email for activation and reset links
            logger: Optional logger
            bcrypt_rounds: bcrypt cost factor
        """
        self.db = db
        self.tokens = tokens
        self.notifier = notifier
        self.logger = logger or logging.getLogger(__name__)
        self.bcrypt_rounds = bcrypt_rounds

    async def signup(
        self,
        first_name: str,
        last_name: str,
        username: str,
        password: str,
    ) -> Dict[str, Any]:
        """Register an inactive account and email its activation link.

        Raises:
            ValidationError: If a field is missing or malformed
            DuplicateUser: If the username is taken
            EmailDeliveryError: If the activation email cannot be sent
        """
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        username = (username or "").strip()

        if not first_name or not last_name:
            raise ValidationError("First name and last name are required")

        is_valid, error = is_valid_email(username)
        if not is_valid:
            raise ValidationError(error)

        is_valid, error = is_valid_password(password)
        if not is_valid:
            raise ValidationError(error)

        if await self.db.get_user_by_username(username):
            raise DuplicateUser()

        user = User(
            first_name=first_name,
            last_name=last_name,
            username=username,
            password_hash=hash_password(password, self.bcrypt_rounds),
        )
        if not await self.db.create_user(user):
            # Lost a race with a concurrent signup for the same username
            raise DuplicateUser()

        activation_token = self.tokens.issue(TokenKind.ACTIVATION, user.id)
        await self.db.set_activation_token(user.id, activation_token)
        await self.notifier.send_activation_email(user.username, activation_token)

        self.logger.info(f"Registered user {user.id}, activation pending")

        return {
            "status": f"Verification link has been sent to your email {user.username}",
            "username": user.username,
        }

    async def activate(self, token: str) -> None:
        """Activate the account named by an activation token.

        Raises:
            InvalidToken: If the token fails verification, names no user,
                or is not the user's current activation token
            AlreadyActivated: If the account is already active
        """
        result = self.tokens.verify(token, TokenKind.ACTIVATION)
        if not result.ok:
            raise InvalidToken()

        user = await self.db.get_user(result.claims.subject)
        if user is None:
            raise InvalidToken()

        if user.is_activated:
            raise AlreadyActivated()

        if user.activation_token != token:
            # Superseded by a resend
            raise InvalidToken()

        await self.db.mark_activated(user.id)
        self.logger.info(f"Activated user {user.id}")

    async def resend_activation(self, username: str) -> bool:
        """Issue a fresh activation token and email it.

        Returns:
            True if an email was sent, False if the account is already active

        Raises:
            UserNotFound: If no account has this username
        """
        user = await self.db.get_user_by_username((username or "").strip())
        if user is None:
            raise UserNotFound("User not found. Please sign up.")

        if user.is_activated:
            return False

        activation_token = self.tokens.issue(TokenKind.ACTIVATION, user.id)
        await self.db.set_activation_token(user.id, activation_token)
        await self.notifier.send_activation_email(user.username, activation_token)

        self.logger.info(f"Re-sent activation link to user {user.id}")
        return True

    async def login(self, username: Optional[str], password: Optional[str]) -> LoginResult:
        """Check credentials and open a session.

        The new refresh token replaces any previous one on the user record.

        Raises:
            MissingCredentials: If username or password is empty
            InvalidCredentials: If the user is unknown or the password is wrong
            NotActivated: If the password matches but the account is inactive
        """
        if not username or not password:
            raise MissingCredentials()

        user = await self.db.get_user_by_username(username.strip())
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        if not user.is_activated:
            raise NotActivated()

        access_token = self.tokens.issue(TokenKind.ACCESS, user.id)
        refresh_token = self.tokens.issue(TokenKind.REFRESH, user.id)
        await self.db.set_refresh_token(user.id, refresh_token)

        self.logger.info(f"User {user.id} logged in")
        return LoginResult(access_token=access_token, refresh_token=refresh_token, user_id=user.id)

    async def refresh(self, refresh_token: Optional[str]) -> str:
        """Mint a new access token from a stored refresh token.

        The refresh token itself is not rotated.

        Raises:
            Unauthorized: If no refresh token was presented
            Forbidden: If the token is not stored, fails verification, or
                names a different user
        """
        if not refresh_token:
            raise Unauthorized()

        user = await self.db.get_user_by_refresh_token(refresh_token)
        if user is None:
            self.logger.warning(f"Refresh with unknown token {mask_token(refresh_token)}")
            raise Forbidden()

        result = self.tokens.verify(refresh_token, TokenKind.REFRESH)
        if not result.ok or result.claims.subject != user.id:
            raise Forbidden()

        return self.tokens.issue(TokenKind.ACCESS, user.id)

    async def logout(self, refresh_token: Optional[str]) -> bool:
        """End the session holding ``refresh_token``.

        Returns:
            True if a stored session was cleared, False if there was nothing
            to clear
        """
        if not refresh_token:
            return False

        user = await self.db.get_user_by_refresh_token(refresh_token)
        if user is None:
            return False

        await self.db.set_refresh_token(user.id, None)
        self.logger.info(f"User {user.id} logged out")
        return True

    async def forgot_password(self, email: Optional[str]) -> None:
        """Email a password reset link.

        Raises:
            UserNotFound: If no account has this email
        """
        user = await self.db.get_user_by_username((email or "").strip())
        if user is None:
            raise UserNotFound("Email ID does not exist")

        reset_token = self.tokens.issue(TokenKind.RESET, user.id)
        await self.db.set_reset_token(user.id, reset_token)
        await self.notifier.send_password_reset_email(user.username, reset_token)

        self.logger.info(f"Password reset requested for user {user.id}")

    async def reset_password(
        self,
        token: str,
        new_password: Optional[str],
        confirm_password: Optional[str] = None,
    ) -> None:
        """Set a new password using a reset token. The token is single-use.

        Raises:
            InvalidOrExpiredToken: If the token is not stored, fails
                verification, or names a different user
            ValidationError: If the password is empty, too long, or does not
                match its confirmation
        """
        user = await self.db.get_user_by_reset_token(token)
        if user is None:
            raise InvalidOrExpiredToken()

        result = self.tokens.verify(token, TokenKind.RESET)
        if not result.ok or result.claims.subject != user.id:
            raise InvalidOrExpiredToken()

        is_valid, error = is_valid_password(new_password)
        if not is_valid:
            raise ValidationError(error)

        if confirm_password is not None and confirm_password != new_password:
            raise ValidationError("Passwords do not match")

        await self.db.replace_password(user.id, hash_password(new_password, self.bcrypt_rounds))
        self.logger.info(f"Password reset for user {user.id}")

    async def authenticate(self, access_token: str) -> str:
        """Verify an access token and return its user id.

        Raises:
            Forbidden: If the token fails verification
        """
        result = self.tokens.verify(access_token, TokenKind.ACCESS)
        if not result.ok:
            raise Forbidden("Invalid token")
        return result.claims.subject

    async def get_profile(self, user_id: str) -> User:
        """Load the user behind an authenticated request.

        Raises:
            UserNotFound: If the user no longer exists
        """
        user = await self.db.get_user(user_id)
        if user is None:
            raise UserNotFound()
        return user
