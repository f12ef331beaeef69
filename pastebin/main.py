"""
Pastebin - Main FastAPI application.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from pastebin.config import Settings
from pastebin.database import build_store
from pastebin.errors import PasteError, StorageError
from pastebin.rendering import render_create_page
from pastebin.routes import health, pastes
from pastebin.service import PasteService

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{field}: {message}" if field else message


def create_app(
    settings: Optional[Settings] = None,
    store=None,
    clock=None,
) -> FastAPI:
    """
    Build the application.

    Without an explicit store, one is connected on startup from settings.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Pastebin",
        description="A lightweight pastebin for sharing text",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.service = PasteService(store, settings, clock) if store is not None else None

    origins = [settings.FRONTEND_ORIGIN] if settings.FRONTEND_ORIGIN else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PasteError)
    async def paste_error_handler(request: Request, exc: PasteError):
        if isinstance(exc, StorageError):
            logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.message}")
            return JSONResponse(status_code=500, content={"error": StorageError.public_message})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation_error(exc)})

    app.include_router(health.router)
    app.include_router(pastes.router)

    @app.on_event("startup")
    def startup_event():
        """Startup event handler."""
        logger.info("Pastebin application starting...")
        if app.state.service is None:
            app.state.service = PasteService(build_store(settings), settings, clock)

        if app.state.service.store.backend_name == "memory":
            logger.warning("DATABASE: Using IN-MEMORY storage")
            logger.warning("   Data will NOT persist across server restarts!")
        else:
            logger.info("DATABASE: Connected to Redis")
        if settings.TEST_MODE:
            logger.warning("TEST_MODE enabled: x-test-now-ms header overrides the clock")

    @app.on_event("shutdown")
    def shutdown_event():
        """Shutdown event handler."""
        logger.info("Pastebin application shutting down...")

    @app.get("/", include_in_schema=False)
    def root():
        """Send visitors to the frontend, or serve the built-in create page."""
        if settings.FRONTEND_ORIGIN:
            return RedirectResponse(settings.FRONTEND_ORIGIN)
        return HTMLResponse(render_create_page())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.settings
    uvicorn.run(
        "pastebin.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
