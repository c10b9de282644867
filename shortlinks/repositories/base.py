"""Generic async repository over SQLModel tables.

Repositories issue statements on the session they are given and never
commit. Every SQLAlchemy failure leaves as ``RepositoryError``; a unique
constraint violation is reported as the more specific
``DuplicateEntityError``.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union
import logging

from pydantic import BaseModel
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

T = TypeVar("T", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A statement failed in the database."""


class DuplicateEntityError(RepositoryError):
    """A write collided with an existing value of a unique column."""

    def __init__(self, model_type: Type[SQLModel], field_name: str, value: Any):
        self.model_type = model_type
        self.field_name = field_name
        self.value = value
        super().__init__(f"{model_type.__name__} with {field_name}={value!r} already exists")


def is_unique_violation(error: IntegrityError) -> bool:
    """Tell unique violations apart from NOT NULL, FK and CHECK failures."""
    # asyncpg reports SQLSTATE 23505; SQLite only has the message text
    if getattr(error.orig, "sqlstate", None) == "23505":
        return True
    message = str(error.orig).lower()
    return "unique constraint" in message or "duplicate key" in message


class BaseRepository(Generic[T, CreateSchemaType, UpdateSchemaType]):
    """
    Basic reads and writes for one table.

    Writes run inside a SAVEPOINT so a failed statement is undone on its
    own and the caller's transaction stays usable. Update and delete are
    single ``... RETURNING`` statements: the row that matched the WHERE
    clause is the row returned, with no read in between.
    """

    def __init__(self, model_type: Type[T], unique_field: Optional[str] = None):
        """
        Args:
            model_type: The table model this repository reads and writes
            unique_field: Column named in DuplicateEntityError
        """
        self.model_type = model_type
        self.unique_field = unique_field

    @property
    def _name(self) -> str:
        return self.model_type.__name__

    @asynccontextmanager
    async def _database_errors(self, action: str, values: Optional[Dict[str, Any]] = None) -> AsyncIterator[None]:
        """Re-raise SQLAlchemy failures of ``action`` as repository errors."""
        try:
            yield
        except IntegrityError as e:
            if values is not None and is_unique_violation(e):
                field_name = self.unique_field or "id"
                raise DuplicateEntityError(self.model_type, field_name, values.get(field_name)) from e
            logger.error(f"Integrity error while trying to {action} {self._name}: {e}")
            raise RepositoryError(f"Could not {action} {self._name}: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Database error while trying to {action} {self._name}: {e}")
            raise RepositoryError(f"Could not {action} {self._name}: {e}") from e

    def _to_dict(self, data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
        if isinstance(data, BaseModel):
            return data.model_dump(exclude_unset=True)
        return dict(data)

    async def get_by_id(self, db: AsyncSession, id: Any) -> Optional[T]:
        """Primary key lookup through the session's identity map."""
        async with self._database_errors("load"):
            return await db.get(self.model_type, id)

    async def find_where(
        self,
        db: AsyncSession,
        *conditions: Any,
        order_by: Optional[Sequence[Any]] = None
    ) -> List[T]:
        """
        Rows matching every condition.

        Args:
            db: Database session
            *conditions: SQLAlchemy boolean expressions
            order_by: Columns or expressions to order by
        """
        query = select(self.model_type).where(*conditions)
        if order_by:
            query = query.order_by(*order_by)

        async with self._database_errors("list"):
            result = await db.execute(query)
            return list(result.scalars().all())

    async def find_one_where(self, db: AsyncSession, *conditions: Any) -> Optional[T]:
        """The single row matching every condition, or None."""
        async with self._database_errors("load"):
            result = await db.execute(select(self.model_type).where(*conditions))
            return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, data: Union[CreateSchemaType, Dict[str, Any]]) -> T:
        """
        Insert a row and return it with its generated ID.

        Raises:
            DuplicateEntityError: If a unique column already holds the value
            RepositoryError: On other database errors
        """
        values = self._to_dict(data)
        entity = self.model_type(**values)

        async with self._database_errors("create", values):
            async with db.begin_nested():
                db.add(entity)
                await db.flush()
            await db.refresh(entity)
        return entity

    async def update_where(
        self,
        db: AsyncSession,
        conditions: Sequence[Any],
        values: Dict[str, Any]
    ) -> Optional[T]:
        """
        Set ``values`` on the row matching ``conditions``.

        Returns:
            The updated row, or None if nothing matched

        Raises:
            DuplicateEntityError: If a new value collides on a unique column
            RepositoryError: On other database errors
        """
        if not conditions:
            raise ValueError("Refusing to update without conditions")

        stmt = (
            update(self.model_type)
            .where(*conditions)
            .values(**values)
            .returning(self.model_type)
            .execution_options(synchronize_session="fetch")
        )
        async with self._database_errors("update", values):
            async with db.begin_nested():
                result = await db.execute(stmt)
                return result.scalars().first()

    async def delete_where(self, db: AsyncSession, conditions: Sequence[Any]) -> Optional[T]:
        """
        Delete the row matching ``conditions``.

        Returns:
            The deleted row, or None if nothing matched
        """
        if not conditions:
            raise ValueError("Refusing to delete without conditions")

        stmt = (
            delete(self.model_type)
            .where(*conditions)
            .returning(self.model_type)
            .execution_options(synchronize_session="fetch")
        )
        async with self._database_errors("delete"):
            result = await db.execute(stmt)
            return result.scalars().first()

    async def exists(self, db: AsyncSession, **filters: Any) -> bool:
        """Whether any row has all the given column values."""
        if not filters:
            raise ValueError("No conditions provided for exists check")

        conditions = [getattr(self.model_type, field) == value for field, value in filters.items()]
        query = select(func.count()).select_from(self.model_type).where(*conditions)
        async with self._database_errors("check"):
            result = await db.execute(query)
            return result.scalar_one() > 0
