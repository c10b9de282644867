"""Link management actions.

Entry points used by the dashboard layer. Each action runs in its own
transaction and reports the outcome as an ActionResult instead of raising,
so callers can show the error string inline.
"""

from typing import List, Optional, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.db.session import db_transaction
from shortlinks.models.link import LinkRead
from shortlinks.services.exceptions import ServiceError, UnauthorizedError
from shortlinks.services.links import LinkService


class ActionResult(BaseModel):
    """Tagged outcome of a management action."""
    success: bool
    data: Optional[Union[LinkRead, List[LinkRead]]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[Union[LinkRead, List[LinkRead]]] = None) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ServiceError) -> "ActionResult":
        return cls(success=False, error=error.message, error_code=error.code)


class LinkActions:
    """Transactional wrappers around LinkService returning ActionResults."""

    def __init__(self, link_service: LinkService):
        self.link_service = link_service

    @db_transaction(db_param_name="db")
    async def create_link(
        self,
        db: AsyncSession,
        caller_id: Optional[str],
        original_url: Optional[str],
        short_code: Optional[str] = None
    ) -> ActionResult:
        try:
            link = await self.link_service.create_link(db, caller_id, original_url, short_code)
        except ServiceError as e:
            return ActionResult.fail(e)
        return ActionResult.ok(LinkRead.model_validate(link))

    @db_transaction(db_param_name="db")
    async def update_link(
        self,
        db: AsyncSession,
        caller_id: Optional[str],
        link_id: int,
        original_url: Optional[str],
        short_code: Optional[str]
    ) -> ActionResult:
        try:
            link = await self.link_service.update_link(db, caller_id, link_id, original_url, short_code)
        except ServiceError as e:
            return ActionResult.fail(e)
        return ActionResult.ok(LinkRead.model_validate(link))

    @db_transaction(db_param_name="db")
    async def delete_link(self, db: AsyncSession, caller_id: Optional[str], link_id: int) -> ActionResult:
        try:
            await self.link_service.delete_link(db, caller_id, link_id)
        except ServiceError as e:
            return ActionResult.fail(e)
        return ActionResult.ok()

    async def list_links(self, db: AsyncSession, caller_id: Optional[str]) -> ActionResult:
        """Dashboard listing for the caller; read-only, so no transaction wrapper."""
        if not caller_id:
            return ActionResult.fail(UnauthorizedError())
        try:
            links = await self.link_service.list_for_owner(db, caller_id)
        except ServiceError as e:
            return ActionResult.fail(e)
        return ActionResult.ok([LinkRead.model_validate(link) for link in links])
