"""Request-scoped sessions and transaction boundaries.

Repositories never commit. A unit of work ends either in a
``db_transaction``-decorated action or when the request session closes,
which discards anything left uncommitted.
"""

from typing import AsyncGenerator, Callable, TypeVar
import logging
import inspect
from functools import wraps

from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.db.base import get_session

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request.

    Example:
        ```python
        @router.get("/links")
        async def list_links(db: AsyncSession = Depends(get_db)):
            return await repository.find_by_owner(db, owner_id)
        ```
    """
    async with get_session() as session:
        try:
            yield session
        except Exception:
            logger.exception("Request failed with an open database session")
            await session.rollback()
            raise


def db_transaction(db_param_name: str = "db") -> Callable:
    """Commit the session passed as ``db_param_name`` when the call returns.

    Any exception rolls the session back and is re-raised. Failures the
    wrapped function turns into return values (such as a failed
    ActionResult) are committed like successes; nothing was written for them.

    Example:
        ```python
        @db_transaction(db_param_name="db")
        async def rename(self, db: AsyncSession, link_id: int, code: str) -> ActionResult:
            ...
        ```

    Raises:
        TypeError: At decoration time, if the function has no such parameter
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        signature = inspect.signature(func)
        if db_param_name not in signature.parameters:
            raise TypeError(f"'{func.__name__}' has no '{db_param_name}' parameter")

        @wraps(func)
        async def wrapper(*args, **kwargs):
            db: AsyncSession = signature.bind_partial(*args, **kwargs).arguments[db_param_name]
            try:
                result = await func(*args, **kwargs)
                await db.commit()
                return result
            except Exception as e:
                await db.rollback()
                logger.exception(f"Transaction failed in '{func.__name__}': {e}")
                raise

        return wrapper
    return decorator
