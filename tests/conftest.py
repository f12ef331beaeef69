from datetime import datetime, timezone
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from pastebin.clock import FixedClock
from pastebin.config import Settings
from pastebin.database import InMemoryPasteStore, RedisPasteStore
from pastebin.errors import StorageError
from pastebin.main import create_app
from pastebin.service import PasteService

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
T0_MS = 1767225600000


class BrokenStore(InMemoryPasteStore):
    """Store whose every call fails like a lost Redis connection."""

    def insert(self, *args, **kwargs):
        raise StorageError("connection refused")

    def get_by_id(self, paste_id):
        raise StorageError("connection refused")

    def increment_view_and_get(self, paste_id):
        raise StorageError("connection refused")

    def ping(self):
        raise StorageError("connection refused")


@pytest.fixture()
def settings() -> Settings:
    return Settings(REDIS_URL="memory://", APP_DOMAIN="http://paste.test/", TEST_MODE=True)


@pytest.fixture()
def store() -> InMemoryPasteStore:
    return InMemoryPasteStore()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture()
def service(store: InMemoryPasteStore, settings: Settings, clock: FixedClock) -> PasteService:
    return PasteService(store, settings, clock)


@pytest.fixture()
def client(settings: Settings, store: InMemoryPasteStore) -> Iterator[TestClient]:
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def redis_store() -> RedisPasteStore:
    fakeredis = pytest.importorskip("fakeredis")
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    return RedisPasteStore(client, key_prefix="test:")


@pytest.fixture(params=["memory", "redis"])
def any_store(request):
    if request.param == "memory":
        return InMemoryPasteStore()
    return request.getfixturevalue("redis_store")
