"""
Configuration module for Pastebin.
Loads environment variables into a settings object built once at startup.
"""
import os
from typing import Optional

from dotenv import load_dotenv

_TRUTHY = ("true", "1", "yes")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(
        self,
        REDIS_URL: str = "redis://localhost:6379",
        REDIS_KEY_PREFIX: str = "paste:",
        APP_DOMAIN: Optional[str] = None,
        FRONTEND_ORIGIN: Optional[str] = None,
        HOST: str = "0.0.0.0",
        PORT: int = 8000,
        TEST_MODE: bool = False,
        DEBUG: bool = False,
        LOG_LEVEL: str = "INFO",
        ALLOW_MEMORY_FALLBACK: bool = True,
    ):
        self.REDIS_URL = REDIS_URL
        self.REDIS_KEY_PREFIX = REDIS_KEY_PREFIX
        self.HOST = HOST
        self.PORT = PORT
        self.APP_DOMAIN = APP_DOMAIN or f"http://localhost:{PORT}"
        self.FRONTEND_ORIGIN = FRONTEND_ORIGIN or None
        self.TEST_MODE = TEST_MODE
        self.DEBUG = DEBUG
        self.LOG_LEVEL = LOG_LEVEL.upper()
        self.ALLOW_MEMORY_FALLBACK = ALLOW_MEMORY_FALLBACK

    @property
    def base_url(self) -> str:
        """Public base URL without a trailing slash."""
        return self.APP_DOMAIN.rstrip("/")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and a .env file)."""
        load_dotenv()

        port_raw = os.getenv("PORT", "8000")
        try:
            port = int(port_raw)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port_raw!r}")

        return cls(
            REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379"),
            REDIS_KEY_PREFIX=os.getenv("REDIS_KEY_PREFIX", "paste:"),
            APP_DOMAIN=os.getenv("APP_DOMAIN") or os.getenv("BASE_URL"),
            FRONTEND_ORIGIN=os.getenv("FRONTEND_ORIGIN"),
            HOST=os.getenv("HOST", "0.0.0.0"),
            PORT=port,
            TEST_MODE=_env_flag("TEST_MODE", "0"),
            DEBUG=_env_flag("DEBUG", "0"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
            ALLOW_MEMORY_FALLBACK=_env_flag("ALLOW_MEMORY_FALLBACK", "1"),
        )

    def __repr__(self) -> str:
        return (
            f"Settings(REDIS_URL={self.REDIS_URL[:30]!r}, APP_DOMAIN={self.APP_DOMAIN!r}, "
            f"PORT={self.PORT}, TEST_MODE={self.TEST_MODE})"
        )
