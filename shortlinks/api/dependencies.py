"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access service instances and the caller identity.
"""

from typing import Optional

from fastapi import Depends, Request

from shortlinks.repositories.link_repository import LinkRepository
from shortlinks.services.actions import LinkActions
from shortlinks.services.links import LinkService
from shortlinks.core.config import settings


async def get_link_repository():
    """Get an instance of the link repository."""
    return LinkRepository()


async def get_link_service(
    link_repo: LinkRepository = Depends(get_link_repository),
) -> LinkService:
    """Get an instance of the link service."""
    return LinkService(link_repository=link_repo)


async def get_link_actions(
    link_service: LinkService = Depends(get_link_service),
) -> LinkActions:
    """Get the management actions bound to the link service."""
    return LinkActions(link_service=link_service)


async def get_caller_id(request: Request) -> Optional[str]:
    """Caller identity asserted by the upstream auth proxy, if any."""
    caller_id = request.headers.get(settings.AUTH_USER_HEADER)
    if caller_id is None:
        return None
    return caller_id.strip() or None
