"""
Health check route.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pastebin.dependencies import get_service
from pastebin.errors import StorageError
from pastebin.models import HealthCheck
from pastebin.service import PasteService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/api/healthz",
    response_model=HealthCheck,
    response_model_exclude_none=True,
    responses={500: {"model": HealthCheck}},
)
def health_check(service: PasteService = Depends(get_service)):
    """
    Health check endpoint.
    Returns 200 with ok=true if the paste store answers, 500 otherwise.
    """
    try:
        service.check_health()
    except StorageError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "Database connection failed"},
        )
    return HealthCheck(ok=True)
