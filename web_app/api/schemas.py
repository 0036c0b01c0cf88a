"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignupRequest(CamelModel):
    """Request to register an account."""

    first_name: str = Field(..., description="First name", max_length=100)
    last_name: str = Field(..., description="Last name", max_length=100)
    username: str = Field(..., description="Email address used as username", max_length=254)
    password: str = Field(..., description="Password")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "firstName": "Ada",
                    "lastName": "Lovelace",
                    "username": "ada@example.com",
                    "password": "analytical-engine",
                }
            ]
        },
    )


class SignupResponse(CamelModel):
    status: str
    username: str


class LoginRequest(CamelModel):
    """Credentials. Both are optional here so that a missing one is reported
    as an authentication error rather than a schema error."""

    username: Optional[str] = Field(None, description="Email address")
    password: Optional[str] = Field(None, description="Password")


class LoginResponse(CamelModel):
    status: str
    access_token: str


class AccessTokenResponse(CamelModel):
    access_token: str


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = Field(None, description="Email address of the account")


class ResetPasswordRequest(CamelModel):
    new_password: Optional[str] = Field(None, description="New password")
    confirm_password: Optional[str] = Field(None, description="Repeat of the new password")


class StatusResponse(CamelModel):
    status: str


class MessageResponse(CamelModel):
    message: str


class ProfileResponse(CamelModel):
    """Public profile of a user, with URL creation counters."""

    first_name: str
    last_name: str
    username: str
    daily_url_counts: Dict[str, int] = Field(default_factory=dict)
    monthly_url_counts: Dict[str, int] = Field(default_factory=dict)


class ShortenRequest(CamelModel):
    """Request to shorten a URL."""

    orig_url: str = Field(..., description="The URL to shorten", min_length=1, max_length=2048)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"origUrl": "https://example.com/very/long/path/to/resource"}
            ]
        },
    )


class ShortUrlResponse(CamelModel):
    """A short URL record."""

    id: str
    orig_url: str = Field(..., description="The original long URL")
    url_id: str = Field(..., description="The short code")
    short_url: str = Field(..., description="The complete short URL")
    count: int = Field(..., description="Number of redirects served")
    created_at: datetime = Field(..., description="Creation timestamp")


class CreatedUrlResponse(CamelModel):
    """One row of the user's URL list."""

    orig_url: str
    short_url: str
    count: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
