"""
FastAPI dependencies shared by the route modules.
"""
from datetime import datetime
from typing import Optional

from fastapi import Header, Request

from pastebin.clock import pinned_now
from pastebin.errors import StorageError
from pastebin.service import PasteService


def get_service(request: Request) -> PasteService:
    service = request.app.state.service
    if service is None:
        raise StorageError("Paste store is not initialised")
    return service


def request_now(
    request: Request,
    x_test_now_ms: Optional[str] = Header(None),
) -> Optional[datetime]:
    """
    Pinned request time from the x-test-now-ms header (TEST_MODE only).

    Returns None when the service clock should be used.
    """
    return pinned_now(request.app.state.settings.TEST_MODE, x_test_now_ms)
