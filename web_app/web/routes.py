"""Public short link routes."""

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

router = APIRouter()


@router.get("/{url_id}", include_in_schema=False)
async def redirect_to_url(request: Request, url_id: str):
    """Redirect to the original URL."""
    service = request.app.state.url_service

    # Also increments the visit count; unknown codes raise ShortUrlNotFound
    orig_url = await service.redirect(url_id)

    # Temporary redirect so every visit reaches the server and is counted
    return RedirectResponse(url=orig_url, status_code=status.HTTP_302_FOUND)
