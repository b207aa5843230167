"""
Tests for the application factory and service endpoints.
"""

from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from main import create_app
from ratelimit import FixedWindowRateLimiter


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "storefront-api"
    assert data["docs"] == "/api-docs"


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_health_check_reports_unavailable_store(client, app):
    broken = MagicMock()
    broken.connect.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    app.state.engine = broken

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json() == {"status": "degraded", "database": "unavailable"}


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

    generated = client.get("/")
    assert generated.headers["X-Request-ID"]


def test_openapi_documents_every_route(client):
    response = client.get("/api-docs/openapi.json")

    assert response.status_code == 200
    paths = response.json()["paths"]
    for path in (
        "/api/v1/customers",
        "/api/v1/customers/{id}",
        "/api/v1/customers/q/{term}",
        "/api/v1/users",
        "/api/v1/users/me",
        "/api/v1/login",
        "/api/v1/logout",
        "/api/v1/p/products",
        "/api/v1/p/products/{id}",
        "/api/v1/p/products/q/{term}",
    ):
        assert path in paths
    assert set(paths["/api/v1/customers"]) == {"get", "post", "put"}
    assert "429" in paths["/api/v1/customers"]["post"]["responses"]


def test_each_app_owns_its_limiter(engine):
    first = create_app(bind=engine)
    injected = FixedWindowRateLimiter(max_requests=2)
    second = create_app(rate_limiter=injected, bind=engine)

    assert first.state.rate_limiter is not second.state.rate_limiter
    assert second.state.rate_limiter is injected
    assert first.state.revoked_tokens is not second.state.revoked_tokens
