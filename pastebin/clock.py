"""
Time sources for the paste lifecycle.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock pinned to a single instant."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def pinned_now(test_mode: bool, x_test_now_ms: Optional[str]) -> Optional[datetime]:
    """
    Request time pinned by the x-test-now-ms header (epoch milliseconds).

    Honoured only in test mode. Returns None when the header is absent,
    ignored, or unparseable.
    """
    if not test_mode or not x_test_now_ms:
        return None

    try:
        return datetime.fromtimestamp(int(x_test_now_ms) / 1000, tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        logger.warning(f"Invalid x-test-now-ms header: {e}")
        return None
