"""Link data models.

This module defines the Link table model together with the input schemas
used to validate link management requests.
"""
import re
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError, field_validator
from pydantic_core import PydanticCustomError
from sqlalchemy import Column, DateTime, Index
from sqlmodel import Field, SQLModel

from shortlinks.core.config import settings

SHORT_CODE_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

_url_adapter = TypeAdapter(AnyUrl)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def check_original_url(value: Any) -> str:
    """Return ``value`` unchanged if it parses as an absolute URL."""
    if not isinstance(value, str):
        raise PydanticCustomError("url_type", "Please enter a valid URL")
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise PydanticCustomError("url_parsing", "Please enter a valid URL") from None
    return value


def check_short_code(value: Any) -> str:
    """Apply the short code rules in order, failing on the first one broken."""
    if not isinstance(value, str):
        raise PydanticCustomError("short_code_type", "Short code must be a string")
    if len(value) < settings.SHORT_CODE_MIN_LENGTH:
        raise PydanticCustomError(
            "short_code_too_short",
            "Short code must be at least {min_length} characters",
            {"min_length": settings.SHORT_CODE_MIN_LENGTH},
        )
    if len(value) > settings.SHORT_CODE_MAX_LENGTH:
        raise PydanticCustomError(
            "short_code_too_long",
            "Short code must be at most {max_length} characters",
            {"max_length": settings.SHORT_CODE_MAX_LENGTH},
        )
    if not SHORT_CODE_PATTERN.match(value):
        raise PydanticCustomError(
            "short_code_pattern",
            "Short code can only contain letters, numbers, hyphens, and underscores",
        )
    return value


class LinkBase(SQLModel):
    """Base model for link data."""

    original_url: str = Field(
        description="The destination URL, stored exactly as submitted"
    )
    short_code: str = Field(
        max_length=settings.SHORT_CODE_MAX_LENGTH,
        unique=True,
        index=True,
        description="Globally unique code used in the redirect path"
    )


class Link(LinkBase, table=True):
    """
    Link model mapping a short code to its destination.

    Each row belongs to exactly one owner. Only the owner may change
    the destination or the code, or delete the row; anyone may
    resolve the code through the redirect endpoint.
    """

    __tablename__ = "links"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(
        description="Opaque identity of the caller that created the link"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __table_args__ = (
        # Dashboard listing: WHERE owner_id = ? ORDER BY created_at DESC
        Index("ix_links_owner_id_created_at", "owner_id", "created_at"),
    )


class LinkRead(LinkBase):
    """Schema for reading a link."""
    id: int
    owner_id: str
    created_at: datetime
    updated_at: datetime


class LinkCreate(SQLModel):
    """Schema for creating a link; the code is generated when omitted."""
    original_url: str
    short_code: Optional[str] = None

    @field_validator("original_url", mode="before")
    @classmethod
    def validate_original_url(cls, v):
        return check_original_url(v)

    @field_validator("short_code", mode="before")
    @classmethod
    def validate_short_code(cls, v):
        if v is None:
            return v
        return check_short_code(v)


class LinkUpdate(SQLModel):
    """Schema for updating a link. Both fields are replaced."""
    link_id: int
    original_url: str
    short_code: str

    @field_validator("original_url", mode="before")
    @classmethod
    def validate_original_url(cls, v):
        return check_original_url(v)

    @field_validator("short_code", mode="before")
    @classmethod
    def validate_short_code(cls, v):
        if v is None:
            raise PydanticCustomError("short_code_missing", "Short code is required")
        return check_short_code(v)


class LinkDelete(SQLModel):
    """Schema for deleting a link."""
    link_id: int
