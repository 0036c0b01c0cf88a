"""Request dependencies shared by the API routers."""

from fastapi import Request

from shortlink.auth_service import AuthService
from shortlink.errors import Unauthorized
from shortlink.url_service import URLShortenerService


REFRESH_COOKIE = "refreshToken"


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_url_service(request: Request) -> URLShortenerService:
    return request.app.state.url_service


async def get_current_user_id(request: Request) -> str:
    """Resolve the bearer access token to a user id.

    A missing or malformed Authorization header is 401; a token that fails
    verification is 403.
    """
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise Unauthorized()

    return await get_auth_service(request).authenticate(token.strip())
