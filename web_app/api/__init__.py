"""API routers, mounted under /api."""

from fastapi import APIRouter

from .auth_routes import router as auth_router
from .routes import router as ops_router
from .url_routes import router as url_router

api_router = APIRouter()
api_router.include_router(ops_router, tags=["Health"])
api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(url_router, prefix="/url", tags=["URL"])

__all__ = ["api_router"]
