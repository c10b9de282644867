"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from shortlinks.api.routes import links, redirect, health
from shortlinks.core.config import settings

# Create root router
api_router = APIRouter()

# Management and health routes live under the API prefix
api_router.include_router(
    links.router,
    prefix=settings.API_PREFIX
)

api_router.include_router(
    health.router,
    prefix=settings.API_PREFIX
)

# Public redirects: /l/{short_code}
api_router.include_router(
    redirect.router,
    prefix=settings.REDIRECT_PREFIX
)

__all__ = ["api_router"]
