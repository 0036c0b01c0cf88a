"""Domain errors for the shortlink service.

Every failure a workflow can report is a ``ShortlinkError`` subclass carrying the
HTTP status it maps to. The web layer turns these into ``{"error": message}``
responses; nothing here is retried.
"""


class ShortlinkError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# Categories

class ValidationError(ShortlinkError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(ShortlinkError):
    status_code = 400
    default_message = "Authentication failed"


class NotFoundError(ShortlinkError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ShortlinkError):
    status_code = 409
    default_message = "Conflict"


class LimitExceededError(ShortlinkError):
    status_code = 400
    default_message = "Limit exceeded"


class InternalError(ShortlinkError):
    status_code = 500
    default_message = "Internal server error"


# Validation

class InvalidURL(ValidationError):
    default_message = "Invalid URL"


class MissingCredentials(ValidationError):
    default_message = "Username and password are required."


# Auth

class InvalidToken(AuthError):
    default_message = "Invalid or expired token"


class InvalidOrExpiredToken(AuthError):
    status_code = 401
    default_message = "Invalid or expired token"


class AlreadyActivated(AuthError):
    default_message = "User is already activated"


class InvalidCredentials(AuthError):
    default_message = "Invalid credentials"


class NotActivated(AuthError):
    default_message = "Please activate your account before login"


class Unauthorized(AuthError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AuthError):
    status_code = 403
    default_message = "Forbidden"


# Not found

class UserNotFound(NotFoundError):
    default_message = "User not found"


class ShortUrlNotFound(NotFoundError):
    default_message = "URL not found"


# Conflict

class DuplicateUser(ConflictError):
    default_message = "Email already in use"


# Limits

class DailyLimitExceeded(LimitExceededError):
    default_message = "Daily limit exceeded"


class MonthlyLimitExceeded(LimitExceededError):
    default_message = "Monthly limit exceeded"


# Internal

class EmailDeliveryError(InternalError):
    default_message = "Error sending email"


class StoreError(InternalError):
    default_message = "Storage error"
