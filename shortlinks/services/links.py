"""Link service for the link shortener application.

This module contains the LinkService class which implements business logic
for creating, updating, deleting, listing and resolving short links.
"""

import logging
from typing import Any, List, Optional, Type, TypeVar

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from shortlinks.core.config import settings
from shortlinks.models.link import Link, LinkCreate, LinkDelete, LinkUpdate
from shortlinks.repositories.base import RepositoryError, DuplicateEntityError
from shortlinks.repositories.link_repository import LinkRepository
from shortlinks.services.codes import generate_short_code
from shortlinks.services.exceptions import (
    InvalidInputError,
    LinkNotFoundError,
    LinkNotFoundOrUnauthorizedError,
    ShortCodeTakenError,
    StorageError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=SQLModel)


class LinkService:
    """
    Service for link lifecycle business logic.

    Every mutating operation takes the caller identity explicitly and checks,
    in order: identity, input validation, then storage. Ownership failures
    and missing rows are reported the same way so callers cannot probe for
    other owners' links.
    """

    def __init__(
        self,
        link_repository: LinkRepository,
        owner_scoped_writes: Optional[bool] = None
    ):
        """
        Initialize the link service.

        Args:
            link_repository: Repository for link data access
            owner_scoped_writes: Filter UPDATE/DELETE by owner before writing.
                When False the row is written first and its owner compared
                afterwards. Defaults to ``settings.OWNERSHIP_CHECK_BEFORE_WRITE``.
        """
        self.link_repository = link_repository
        if owner_scoped_writes is None:
            owner_scoped_writes = settings.OWNERSHIP_CHECK_BEFORE_WRITE
        self.owner_scoped_writes = owner_scoped_writes

    async def create_link(
        self,
        db: AsyncSession,
        caller_id: Optional[str],
        original_url: Any,
        short_code: Any = None
    ) -> Link:
        """
        Create a link owned by the caller.

        Args:
            db: Database session
            caller_id: Identity of the authenticated caller
            original_url: Destination URL
            short_code: Optional explicit code; generated when omitted

        Returns:
            Link: The created link

        Raises:
            UnauthorizedError: If no caller identity is given
            InvalidInputError: If the URL or short code is malformed
            ShortCodeTakenError: If the short code is already in use
            StorageError: If the link could not be stored
        """
        self._require_caller(caller_id)
        payload = self._validate(LinkCreate, original_url=original_url, short_code=short_code)

        # No retry on collision: a generated duplicate is reported like an explicit one
        code = payload.short_code or generate_short_code()

        try:
            link = await self.link_repository.insert(db, {
                "owner_id": caller_id,
                "original_url": payload.original_url,
                "short_code": code,
            })
        except DuplicateEntityError as e:
            logger.info(f"Short code already taken: {e}")
            raise ShortCodeTakenError() from e
        except RepositoryError as e:
            logger.error(f"Error creating link: {e}")
            raise StorageError("Failed to create link") from e

        logger.info(f"Link {link.id} created with code '{link.short_code}'")
        return link

    async def update_link(
        self,
        db: AsyncSession,
        caller_id: Optional[str],
        link_id: Any,
        original_url: Any,
        short_code: Any
    ) -> Link:
        """
        Replace the destination and code of a link owned by the caller.

        Args:
            db: Database session
            caller_id: Identity of the authenticated caller
            link_id: ID of the link
            original_url: New destination URL
            short_code: New short code (required)

        Returns:
            Link: The updated link

        Raises:
            UnauthorizedError: If no caller identity is given
            InvalidInputError: If any field is malformed
            LinkNotFoundOrUnauthorizedError: If the link is missing or not the caller's
            ShortCodeTakenError: If the new short code belongs to another link
            StorageError: If the update could not be stored
        """
        self._require_caller(caller_id)
        payload = self._validate(
            LinkUpdate,
            link_id=link_id,
            original_url=original_url,
            short_code=short_code,
        )

        try:
            link = await self.link_repository.update(
                db,
                payload.link_id,
                {"original_url": payload.original_url, "short_code": payload.short_code},
                owner_id=self._write_filter(caller_id),
            )
        except DuplicateEntityError as e:
            logger.info(f"Short code already taken: {e}")
            raise ShortCodeTakenError() from e
        except RepositoryError as e:
            logger.error(f"Error updating link {payload.link_id}: {e}")
            raise StorageError("Failed to update link") from e

        self._check_owner(link, caller_id, payload.link_id, "updated")
        return link

    async def delete_link(self, db: AsyncSession, caller_id: Optional[str], link_id: Any) -> None:
        """
        Delete a link owned by the caller.

        Args:
            db: Database session
            caller_id: Identity of the authenticated caller
            link_id: ID of the link

        Raises:
            UnauthorizedError: If no caller identity is given
            InvalidInputError: If the link ID is malformed
            LinkNotFoundOrUnauthorizedError: If the link is missing or not the caller's
            StorageError: If the delete could not be performed
        """
        self._require_caller(caller_id)
        payload = self._validate(LinkDelete, link_id=link_id)

        try:
            link = await self.link_repository.delete(
                db, payload.link_id, owner_id=self._write_filter(caller_id)
            )
        except RepositoryError as e:
            logger.error(f"Error deleting link {payload.link_id}: {e}")
            raise StorageError("Failed to delete link") from e

        self._check_owner(link, caller_id, payload.link_id, "deleted")

    async def resolve(self, db: AsyncSession, short_code: str) -> str:
        """
        Resolve a short code to its destination. No identity is needed.

        Args:
            db: Database session
            short_code: The short code to look up

        Returns:
            str: The stored original URL

        Raises:
            LinkNotFoundError: If no link has this code
            StorageError: If the lookup failed
        """
        try:
            link = await self.link_repository.find_by_short_code(db, short_code)
        except RepositoryError as e:
            logger.error(f"Error resolving short code '{short_code}': {e}")
            raise StorageError("Failed to resolve link") from e

        if link is None:
            raise LinkNotFoundError()
        return link.original_url

    async def list_for_owner(self, db: AsyncSession, owner_id: str) -> List[Link]:
        """
        Get the owner's links, most recent first.

        Args:
            db: Database session
            owner_id: Identity of the owner

        Returns:
            List[Link]: The owner's links

        Raises:
            StorageError: If the links could not be loaded
        """
        try:
            return await self.link_repository.find_by_owner(db, owner_id)
        except RepositoryError as e:
            logger.error(f"Error listing links for owner: {e}")
            raise StorageError("Failed to load links") from e

    def _require_caller(self, caller_id: Optional[str]) -> None:
        if not caller_id:
            raise UnauthorizedError()

    def _validate(self, schema: Type[S], **data: Any) -> S:
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            raise InvalidInputError(e.errors()[0]["msg"]) from e

    def _write_filter(self, caller_id: str) -> Optional[str]:
        return caller_id if self.owner_scoped_writes else None

    def _check_owner(self, link: Optional[Link], caller_id: str, link_id: int, action: str) -> None:
        if link is None:
            raise LinkNotFoundOrUnauthorizedError()
        if link.owner_id != caller_id:
            # Only reachable with owner_scoped_writes disabled; the write already happened
            logger.warning(f"Link {link_id} {action} by a caller that does not own it")
            raise LinkNotFoundOrUnauthorizedError()
