"""
Paste lifecycle service.
Validates input, creates pastes, and gates access on expiry and view limits.
"""
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from pastebin.clock import SystemClock
from pastebin.config import Settings
from pastebin.database import Paste
from pastebin.errors import ConflictError, NotFoundError, StorageError, ValidationError
from pastebin.models import PasteView
from pastebin.rendering import render_paste_page

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_letters + string.digits + "_-"
ID_LENGTH = 10
MAX_ID_ATTEMPTS = 3
NOT_FOUND_MESSAGE = "Paste not found"


@dataclass(frozen=True)
class CreatedPaste:
    id: str
    url: str


def generate_paste_id(length: int = ID_LENGTH) -> str:
    """Random URL-safe id; 10 symbols of a 64-symbol alphabet is 60 bits."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def is_accessible(paste: Paste, now: datetime) -> bool:
    """Whether a paste may be served at `now`, before counting this access."""
    if paste.expires_at is not None and now >= paste.expires_at:
        return False
    if paste.max_views is not None and paste.view_count >= paste.max_views:
        return False
    return True


def remaining_views(paste: Paste) -> Optional[int]:
    if paste.max_views is None:
        return None
    return max(0, paste.max_views - paste.view_count)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO 8601 in UTC with millisecond precision and a Z suffix."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _validate_limit(name: str, value) -> None:
    if value is None:
        return
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be an integer >= 1")


class PasteService:
    """Applies the paste lifecycle rules on top of a paste store."""

    def __init__(self, store, settings: Settings, clock=None):
        self.store = store
        self.settings = settings
        self.clock = clock or SystemClock()

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self.clock.now()

    def create_paste(
        self,
        content,
        ttl_seconds: Optional[int] = None,
        max_views: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> CreatedPaste:
        """
        Create a new paste.

        Args:
            content: Text content, non-empty after trimming
            ttl_seconds: Optional lifetime in seconds (>= 1)
            max_views: Optional view limit (>= 1)
            now: Creation time; defaults to the service clock

        Returns:
            The paste id and its shareable URL

        Raises:
            ValidationError: If input is invalid
            StorageError: If the paste could not be saved
        """
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("content is required and must be a non-empty string")
        _validate_limit("ttl_seconds", ttl_seconds)
        _validate_limit("max_views", max_views)

        created_at = self._now(now)
        expires_at = None
        if ttl_seconds is not None:
            try:
                expires_at = created_at + timedelta(seconds=ttl_seconds)
            except OverflowError:
                raise ValidationError("ttl_seconds is too large")

        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            paste_id = generate_paste_id()
            try:
                self.store.insert(
                    paste_id,
                    content,
                    created_at=created_at,
                    expires_at=expires_at,
                    max_views=max_views,
                )
                break
            except ConflictError:
                logger.warning(f"Paste id collision on attempt {attempt}: {paste_id}")
        else:
            raise StorageError("Could not allocate a unique paste id")

        logger.info(f"Paste {paste_id} created (ttl_seconds={ttl_seconds}, max_views={max_views})")
        return CreatedPaste(id=paste_id, url=f"{self.settings.base_url}/p/{paste_id}")

    def _access(self, paste_id: str, now: datetime) -> Paste:
        """Check accessibility and count one view. Raises NotFoundError otherwise."""
        paste = self.store.get_by_id(paste_id)
        if paste is None:
            logger.info(f"Paste {paste_id} not found")
            raise NotFoundError(NOT_FOUND_MESSAGE)

        if not is_accessible(paste, now):
            logger.info(f"Paste {paste_id} is no longer accessible, purging")
            self.store.delete(paste_id)
            raise NotFoundError(NOT_FOUND_MESSAGE)

        updated = self.store.increment_view_and_get(paste_id)
        if updated is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        # Concurrent readers may all pass the check above; the counter
        # value each one got back decides who is within the limit.
        if updated.max_views is not None and updated.view_count > updated.max_views:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return updated

    def fetch_paste(self, paste_id: str, now: Optional[datetime] = None) -> PasteView:
        """Fetch a paste for the JSON API. Each fetch counts as a view."""
        paste = self._access(paste_id, self._now(now))
        return PasteView(
            content=paste.content,
            remaining_views=remaining_views(paste),
            expires_at=format_timestamp(paste.expires_at),
        )

    def render_paste(self, paste_id: str, now: Optional[datetime] = None) -> str:
        """Render a paste as an HTML page. Each render counts as a view."""
        paste = self._access(paste_id, self._now(now))
        return render_paste_page(
            paste_id=paste.id,
            content=paste.content,
            remaining=remaining_views(paste),
            expires_at=format_timestamp(paste.expires_at),
            home_url=self.home_url,
        )

    @property
    def home_url(self) -> str:
        """Where the 'create a new paste' links point."""
        return self.settings.FRONTEND_ORIGIN or "/"

    def check_health(self) -> None:
        self.store.ping()
