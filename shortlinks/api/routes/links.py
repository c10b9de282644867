"""Link management endpoints for the owner dashboard.

Every endpoint answers with the tagged action result; the HTTP status
mirrors the error code so generic clients can branch on it too.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.api import schemas
from shortlinks.api.dependencies import get_caller_id, get_link_actions
from shortlinks.db.session import get_db
from shortlinks.services.actions import ActionResult, LinkActions

router = APIRouter(prefix="/links", tags=["links"])

ERROR_STATUS = {
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "invalid_input": status.HTTP_400_BAD_REQUEST,
    "code_taken": status.HTTP_409_CONFLICT,
    "not_found_or_unauthorized": status.HTTP_404_NOT_FOUND,
    "storage_failure": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_RESPONSES = {
    400: {"model": schemas.ActionResponse, "description": "Invalid URL or short code"},
    401: {"model": schemas.ActionResponse, "description": "No caller identity"},
    500: {"model": schemas.ActionResponse, "description": "Storage failure"},
}


def to_response(result: ActionResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Render an ActionResult with the status matching its outcome."""
    if result.success:
        status_code = success_status
    else:
        status_code = ERROR_STATUS.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    body = schemas.ActionResponse.from_result(result)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


@router.post(
    "",
    response_model=schemas.ActionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **ERROR_RESPONSES,
        409: {"model": schemas.ActionResponse, "description": "Short code already taken"},
    }
)
async def create_link(
    link_data: schemas.LinkCreateRequest,
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
    actions: LinkActions = Depends(get_link_actions),
):
    """Create a link; a random code is generated when ``short_code`` is omitted."""
    result = await actions.create_link(
        db,
        caller_id,
        link_data.original_url,
        link_data.short_code,
    )
    if result.success:
        logger.info("Link created", link_id=result.data.id, short_code=result.data.short_code)
    return to_response(result, status.HTTP_201_CREATED)


@router.get(
    "",
    response_model=schemas.ActionResponse,
    responses={401: ERROR_RESPONSES[401], 500: ERROR_RESPONSES[500]}
)
async def list_links(
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
    actions: LinkActions = Depends(get_link_actions),
):
    """List the caller's links, most recent first."""
    result = await actions.list_links(db, caller_id)
    return to_response(result)


@router.put(
    "/{link_id}",
    response_model=schemas.ActionResponse,
    responses={
        **ERROR_RESPONSES,
        404: {"model": schemas.ActionResponse, "description": "Link not found or unauthorized"},
        409: {"model": schemas.ActionResponse, "description": "Short code already taken"},
    }
)
async def update_link(
    link_data: schemas.LinkUpdateRequest,
    link_id: int = Path(..., description="ID of the link"),
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
    actions: LinkActions = Depends(get_link_actions),
):
    result = await actions.update_link(
        db,
        caller_id,
        link_id,
        link_data.original_url,
        link_data.short_code,
    )
    return to_response(result)


@router.delete(
    "/{link_id}",
    response_model=schemas.ActionResponse,
    responses={
        **ERROR_RESPONSES,
        404: {"model": schemas.ActionResponse, "description": "Link not found or unauthorized"},
    }
)
async def delete_link(
    link_id: int = Path(..., description="ID of the link"),
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
    actions: LinkActions = Depends(get_link_actions),
):
    result = await actions.delete_link(db, caller_id, link_id)
    if result.success:
        logger.info("Link deleted", link_id=link_id)
    return to_response(result)
