"""API request and response schemas.

This module contains Pydantic models for API request parsing
and response serialization. Field rules are enforced by the service
layer so that every caller gets the same validation messages.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel

from shortlinks.core.config import settings
from shortlinks.models.link import LinkRead
from shortlinks.services.actions import ActionResult


class LinkCreateRequest(BaseModel):
    """Request schema for creating a link."""
    original_url: Optional[str] = None
    short_code: Optional[str] = None


class LinkUpdateRequest(BaseModel):
    """Request schema for updating a link."""
    original_url: Optional[str] = None
    short_code: Optional[str] = None


class LinkResponse(BaseModel):
    """Response schema for link information."""
    id: int
    short_code: str
    original_url: str
    short_url: str  # Full redirect URL including base domain
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_link(cls, link: LinkRead) -> "LinkResponse":
        return cls(
            id=link.id,
            short_code=link.short_code,
            original_url=link.original_url,
            short_url=settings.short_url(link.short_code),
            created_at=link.created_at,
            updated_at=link.updated_at,
        )


class ActionResponse(BaseModel):
    """Tagged action result as returned over HTTP."""
    success: bool
    data: Optional[Union[LinkResponse, List[LinkResponse]]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def from_result(cls, result: ActionResult) -> "ActionResponse":
        data = result.data
        if isinstance(data, list):
            data = [LinkResponse.from_link(link) for link in data]
        elif data is not None:
            data = LinkResponse.from_link(data)
        return cls(
            success=result.success,
            data=data,
            error=result.error,
            error_code=result.error_code,
        )
