"""
Data models for the link shortener application.

This module imports and exports all SQLModel models used in the application.
"""

from shortlinks.models.link import (
    Link,
    LinkBase,
    LinkCreate,
    LinkDelete,
    LinkRead,
    LinkUpdate,
)

__all__ = [
    "Link",
    "LinkBase",
    "LinkCreate",
    "LinkDelete",
    "LinkRead",
    "LinkUpdate",
]
