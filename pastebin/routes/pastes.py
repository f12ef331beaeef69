"""
Paste routes.
Handles create, fetch (API), and view (HTML) operations.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from pastebin.dependencies import get_service, request_now
from pastebin.errors import NotFoundError, StorageError
from pastebin.models import ErrorResponse, PasteCreate, PasteResponse, PasteView
from pastebin.rendering import render_error_page, render_not_found_page
from pastebin.service import PasteService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/api/pastes",
    response_model=PasteResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_paste(
    paste: PasteCreate,
    service: PasteService = Depends(get_service),
    now: Optional[datetime] = Depends(request_now),
) -> PasteResponse:
    """
    Create a new paste.

    Args:
        paste: Paste data (content, optional ttl_seconds, optional max_views)

    Returns:
        Paste ID and shareable URL
    """
    created = service.create_paste(
        paste.content,
        ttl_seconds=paste.ttl_seconds,
        max_views=paste.max_views,
        now=now,
    )
    return PasteResponse(id=created.id, url=created.url)


@router.get(
    "/api/pastes/{paste_id}",
    response_model=PasteView,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def fetch_paste(
    paste_id: str,
    service: PasteService = Depends(get_service),
    now: Optional[datetime] = Depends(request_now),
) -> PasteView:
    """
    Fetch a paste (API endpoint).
    Each fetch increments the view count; missing, expired, and
    exhausted pastes all answer 404.
    """
    return service.fetch_paste(paste_id, now=now)


@router.get("/p/{paste_id}", response_class=HTMLResponse)
def view_paste(
    paste_id: str,
    request: Request,
    now: Optional[datetime] = Depends(request_now),
) -> HTMLResponse:
    """
    View a paste as HTML.
    Each view increments the view count. Failures render HTML pages,
    including a store that never came up.
    """
    home_url = request.app.state.settings.FRONTEND_ORIGIN or "/"
    try:
        page = get_service(request).render_paste(paste_id, now=now)
    except NotFoundError:
        return HTMLResponse(render_not_found_page(home_url), status_code=404)
    except StorageError:
        logger.exception(f"Failed to render paste {paste_id}")
        return HTMLResponse(render_error_page(home_url), status_code=500)
    return HTMLResponse(page)
