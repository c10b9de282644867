"""Public redirect endpoint."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from shortlinks.api.dependencies import get_link_service
from shortlinks.db.session import get_db
from shortlinks.services.links import LinkService
from shortlinks.services.exceptions import LinkNotFoundError

router = APIRouter(tags=["redirect"])


@router.get(
    "/{short_code}",
    response_class=RedirectResponse,
    status_code=status.HTTP_301_MOVED_PERMANENTLY,
    responses={
        404: {"description": "Link not found"},
        500: {"description": "Storage failure"},
    }
)
async def redirect_to_original_url(
    short_code: str,
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
):
    """Permanently redirect to the destination stored for ``short_code``."""
    try:
        original_url = await link_service.resolve(db, short_code)
    except LinkNotFoundError:
        return PlainTextResponse("Link not found", status_code=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        logger.error("Error redirecting link", short_code=short_code, error=str(e))
        return PlainTextResponse(
            "Internal Server Error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return RedirectResponse(url=original_url, status_code=status.HTTP_301_MOVED_PERMANENTLY)
