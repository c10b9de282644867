"""Link Repository for the link shortener application.

This module provides the LinkRepository class for database operations related to Link models.
Following the Repository pattern, it abstracts database interactions for the link lifecycle.
"""

from typing import Any, Dict, List, Optional, Union

from sqlalchemy import desc
from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.models.link import Link, LinkCreate, LinkUpdate, utc_now
from shortlinks.repositories.base import BaseRepository, RepositoryError, DuplicateEntityError

UPDATABLE_FIELDS = ("original_url", "short_code")


class LinkRepository(BaseRepository[Link, LinkCreate, LinkUpdate]):
    """
    Repository for Link model database operations.

    Every lookup is an equality match on a single column. No method checks
    ownership on its own: ``update`` and ``delete`` only narrow their WHERE
    clause by owner when the caller passes ``owner_id``.
    """

    def __init__(self):
        """Initialize the repository with the Link model type."""
        super().__init__(Link, unique_field="short_code")

    async def insert(self, db: AsyncSession, data: Union[LinkCreate, Dict[str, Any]]) -> Link:
        """
        Persist a new link.

        Args:
            db: Database session
            data: Link data including owner_id, original_url and short_code

        Returns:
            The created Link

        Raises:
            DuplicateEntityError: If the short code already exists
            RepositoryError: On other database errors
        """
        return await self.create(db, data)

    async def find_by_owner(self, db: AsyncSession, owner_id: str) -> List[Link]:
        """
        Get every link belonging to an owner, most recent first.

        Args:
            db: Database session
            owner_id: Identity of the owner

        Returns:
            List of Link entities ordered by creation date (descending)

        Raises:
            RepositoryError: On database errors
        """
        return await self.find_where(
            db,
            self.model_type.owner_id == owner_id,
            order_by=[desc(self.model_type.created_at), desc(self.model_type.id)],
        )

    async def find_by_short_code(self, db: AsyncSession, short_code: str) -> Optional[Link]:
        """
        Find a link by its short code.

        Args:
            db: Database session
            short_code: The unique short code to look up

        Returns:
            The Link if found, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        return await self.find_one_where(db, self.model_type.short_code == short_code)

    async def update(
        self,
        db: AsyncSession,
        link_id: int,
        data: Union[LinkUpdate, Dict[str, Any]],
        owner_id: Optional[str] = None
    ) -> Optional[Link]:
        """
        Apply a partial update to a link and refresh its updated_at.

        Args:
            db: Database session
            link_id: ID of the link to update
            data: Any of original_url and short_code
            owner_id: When given, only a row owned by this identity is updated

        Returns:
            The updated Link, or None if no row matched

        Raises:
            DuplicateEntityError: If the new short code belongs to another link
            RepositoryError: On other database errors
        """
        data_dict = self._to_dict(data)
        values = {key: data_dict[key] for key in UPDATABLE_FIELDS if key in data_dict}
        values["updated_at"] = utc_now()

        return await self.update_where(db, self._row_conditions(link_id, owner_id), values)

    async def delete(
        self,
        db: AsyncSession,
        link_id: int,
        owner_id: Optional[str] = None
    ) -> Optional[Link]:
        """
        Delete a link and return the removed record.

        Args:
            db: Database session
            link_id: ID of the link to delete
            owner_id: When given, only a row owned by this identity is deleted

        Returns:
            The deleted Link, or None if no row matched

        Raises:
            RepositoryError: On database errors
        """
        return await self.delete_where(db, self._row_conditions(link_id, owner_id))

    async def check_short_code_exists(self, db: AsyncSession, short_code: str) -> bool:
        """
        Check if a short code is already in use.

        Args:
            db: Database session
            short_code: The short code to check

        Returns:
            True if the short code exists, False otherwise

        Raises:
            RepositoryError: On database errors
        """
        return await self.exists(db, short_code=short_code)

    def _row_conditions(self, link_id: int, owner_id: Optional[str]) -> List[Any]:
        conditions = [self.model_type.id == link_id]
        if owner_id is not None:
            conditions.append(self.model_type.owner_id == owner_id)
        return conditions


__all__ = ["LinkRepository", "RepositoryError", "DuplicateEntityError"]
