"""Repository layer for the link shortener application.

This module provides repository classes that abstract database operations
and implement the Repository pattern for clean separation of concerns.
"""

from shortlinks.repositories.base import (
    BaseRepository,
    RepositoryError,
    DuplicateEntityError
)
from shortlinks.repositories.link_repository import LinkRepository

__all__ = [
    # Base classes and exceptions
    "BaseRepository",
    "RepositoryError",
    "DuplicateEntityError",

    # Concrete repositories
    "LinkRepository",
]
