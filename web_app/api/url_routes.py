"""Short URL routes: create, dashboard, list and redirect."""

from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, RedirectResponse

from shortlink.url_service import URLShortenerService
from .dependencies import get_current_user_id, get_url_service
from .schemas import (
    CreatedUrlResponse,
    ErrorResponse,
    ProfileResponse,
    ShortenRequest,
    ShortUrlResponse,
)

router = APIRouter()


@router.post(
    "/short-url",
    response_model=ShortUrlResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": ShortUrlResponse, "description": "URL was already shortened by this user"},
        400: {"model": ErrorResponse, "description": "Invalid URL or limit exceeded"},
        401: {"model": ErrorResponse, "description": "Missing bearer token"},
        403: {"model": ErrorResponse, "description": "Invalid token"},
    },
    summary="Create short URL",
    description=(
        "Shorten a URL for the logged-in user. Every call counts against the "
        "daily and monthly limits, including repeats of an existing URL."
    ),
)
async def shorten_url(
    body: ShortenRequest,
    user_id: str = Depends(get_current_user_id),
    service: URLShortenerService = Depends(get_url_service),
):
    record, created = await service.shorten(body.orig_url, user_id)

    payload = ShortUrlResponse(**record.to_dict())
    if created:
        return payload

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=payload.model_dump(mode="json", by_alias=True),
    )


@router.get(
    "/dashboard",
    response_model=ProfileResponse,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Profile and URL counters",
)
async def dashboard(
    user_id: str = Depends(get_current_user_id),
    service: URLShortenerService = Depends(get_url_service),
):
    user = await service.dashboard(user_id)
    return ProfileResponse(**user.to_dict())


@router.get(
    "/created-url",
    response_model=List[CreatedUrlResponse],
    summary="List the user's short URLs",
)
async def created_urls(
    user_id: str = Depends(get_current_user_id),
    service: URLShortenerService = Depends(get_url_service),
):
    records = await service.list_urls(user_id)
    return [
        CreatedUrlResponse(orig_url=r.orig_url, short_url=r.short_url, count=r.count)
        for r in records
    ]


# Declared last: the path parameter would otherwise shadow the routes above
@router.get(
    "/{url_id}",
    responses={
        302: {"description": "Redirect to the original URL"},
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Follow a short URL",
)
async def redirect_to_url(url_id: str, service: URLShortenerService = Depends(get_url_service)):
    """Count the visit and redirect to the original URL."""
    orig_url = await service.redirect(url_id)
    return RedirectResponse(url=orig_url, status_code=status.HTTP_302_FOUND)
