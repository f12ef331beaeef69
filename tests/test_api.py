import pytest
from fastapi.testclient import TestClient

from pastebin.config import Settings
from pastebin.database import InMemoryPasteStore
from pastebin.main import create_app

from tests.conftest import T0_MS, BrokenStore


def _create(client: TestClient, headers=None, **payload):
    response = client.post("/api/pastes", json=payload, headers=headers or {})
    assert response.status_code == 201, response.text
    return response.json()


def test_healthz(client: TestClient):
    response = client.get("/api/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_create_returns_id_and_url(client: TestClient):
    body = _create(client, content="hello")
    assert body["url"] == f"http://paste.test/p/{body['id']}"


def test_round_trip(client: TestClient):
    body = _create(client, content="hello\nworld")

    response = client.get(f"/api/pastes/{body['id']}")
    assert response.status_code == 200
    assert response.json() == {"content": "hello\nworld", "remaining_views": None, "expires_at": None}


def test_expiry_with_pinned_clock(client: TestClient):
    body = _create(client, headers={"x-test-now-ms": str(T0_MS)}, content="ttl", ttl_seconds=5)
    url = f"/api/pastes/{body['id']}"

    response = client.get(url, headers={"x-test-now-ms": str(T0_MS + 4000)})
    assert response.status_code == 200
    assert response.json()["expires_at"] == "2026-01-01T00:00:05.000Z"

    assert client.get(url, headers={"x-test-now-ms": str(T0_MS + 5000)}).status_code == 404
    assert client.get(url, headers={"x-test-now-ms": str(T0_MS + 60000)}).status_code == 404


def test_view_limit(client: TestClient):
    body = _create(client, content="limited", max_views=2)
    url = f"/api/pastes/{body['id']}"

    assert client.get(url).json()["remaining_views"] == 1
    assert client.get(url).json()["remaining_views"] == 0
    assert client.get(url).status_code == 404
    assert client.get(url).status_code == 404


@pytest.mark.parametrize(
    "payload",
    [
        {"content": ""},
        {"content": "   "},
        {},
        {"content": 42},
        {"content": "x", "ttl_seconds": 0},
        {"content": "x", "ttl_seconds": 10**12},
        {"content": "x", "ttl_seconds": 2.5},
        {"content": "x", "ttl_seconds": "10"},
        {"content": "x", "max_views": -1},
    ],
)
def test_validation_failures_return_400(client: TestClient, payload):
    response = client.post("/api/pastes", json=payload)
    assert response.status_code == 400
    assert "error" in response.json()


def test_malformed_json_returns_400(client: TestClient):
    response = client.post(
        "/api/pastes",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400


def test_html_view_escapes_markup(client: TestClient):
    body = _create(client, content="<script>alert(1)</script> & 'q' \"d\"")

    response = client.get(f"/p/{body['id']}")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<script>alert(1)</script>" not in response.text
    assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; &#x27;q&#x27; &quot;d&quot;" in response.text


def test_html_view_counts_views(client: TestClient):
    body = _create(client, content="once", max_views=1)

    assert client.get(f"/p/{body['id']}").status_code == 200
    response = client.get(f"/p/{body['id']}")
    assert response.status_code == 404
    assert "Create a new paste" in response.text


def test_not_found_is_indistinguishable(client: TestClient):
    expired = _create(client, headers={"x-test-now-ms": str(T0_MS)}, content="a", ttl_seconds=1)
    exhausted = _create(client, content="b", max_views=1)
    client.get(f"/api/pastes/{exhausted['id']}")
    late = {"x-test-now-ms": str(T0_MS + 2000)}

    json_bodies = {
        client.get("/api/pastes/does-not-exist", headers=late).text,
        client.get(f"/api/pastes/{expired['id']}", headers=late).text,
        client.get(f"/api/pastes/{exhausted['id']}", headers=late).text,
    }
    html_bodies = {
        client.get("/p/does-not-exist-either").text,
        client.get(f"/p/{expired['id']}").text,
        client.get(f"/p/{exhausted['id']}").text,
    }
    assert len(json_bodies) == 1
    assert len(html_bodies) == 1


def test_clock_header_ignored_outside_test_mode(store: InMemoryPasteStore):
    app = create_app(Settings(REDIS_URL="memory://", TEST_MODE=False), store=store)
    with TestClient(app) as client:
        body = _create(client, content="real clock", ttl_seconds=60)
        far_future = str(T0_MS + 10 * 365 * 24 * 3600 * 1000)
        response = client.get(f"/api/pastes/{body['id']}", headers={"x-test-now-ms": far_future})
        assert response.status_code == 200


def test_storage_failures_return_generic_500():
    app = create_app(Settings(REDIS_URL="memory://", TEST_MODE=True), store=BrokenStore())
    with TestClient(app) as client:
        health = client.get("/api/healthz")
        assert health.status_code == 500
        assert health.json()["ok"] is False

        create = client.post("/api/pastes", json={"content": "x"})
        assert create.status_code == 500
        assert create.json() == {"error": "Internal server error"}

        fetch = client.get("/api/pastes/abc")
        assert fetch.status_code == 500
        assert "connection refused" not in fetch.text

        page = client.get("/p/abc")
        assert page.status_code == 500
        assert page.headers["content-type"].startswith("text/html")


def test_html_view_without_store_renders_error_page():
    app = create_app(Settings(REDIS_URL="memory://"))
    # Startup never runs without the context manager, so no store exists
    client = TestClient(app)

    page = client.get("/p/abc")
    assert page.status_code == 500
    assert page.headers["content-type"].startswith("text/html")

    api = client.get("/api/pastes/abc")
    assert api.status_code == 500
    assert api.json() == {"error": "Internal server error"}


def test_root_serves_create_page(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    assert "paste-form" in response.text


def test_root_redirects_to_frontend(store: InMemoryPasteStore):
    settings = Settings(REDIS_URL="memory://", FRONTEND_ORIGIN="https://paste.example")
    app = create_app(settings, store=store)
    with TestClient(app) as client:
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"] == "https://paste.example"
