"""Tests for FastAPI application and exception handlers."""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.main import create_app


@pytest.fixture
def app():
    """Create test application instance."""
    return create_app()


@pytest.fixture
async def client(app):
    """Create async HTTP client for testing.

    raise_app_exceptions=False so unhandled errors surface as the 500
    response instead of propagating into the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_healthy_status(self, client):
        """Health endpoint should return 200 and healthy status."""
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAPIVersioning:
    """Tests for API versioning."""

    @pytest.mark.asyncio
    async def test_v1_router_mounted(self, client):
        """Unknown routes under /api/v1 are plain 404s."""
        response = await client.get("/api/v1/nonexistent")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_todo_routes_require_auth(self, client):
        """Todo routes are mounted behind the auth gate."""
        response = await client.get("/api/v1/todos")
        assert response.status_code == 401


class TestExceptionHandlers:
    """Tests for exception handlers.

    These tests verify that our custom exceptions are properly
    converted to HTTP responses with the correct error envelope.
    """

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("exc", "status", "code"),
        [
            (ValidationError("Invalid input", field="title"), 400, "VALIDATION_ERROR"),
            (UnauthorizedError(), 401, "UNAUTHORIZED"),
            (NotFoundError("Todo"), 404, "NOT_FOUND"),
            (ConflictError(code="DUPLICATE", message="dup"), 409, "DUPLICATE"),
        ],
    )
    async def test_api_errors_use_envelope(self, app, client, exc, status, code):
        """APIError subclasses map to their status and the error envelope."""

        @app.get("/test/raise")
        async def raise_error():
            raise exc

        response = await client.get("/test/raise")
        assert response.status_code == status
        body = response.json()
        assert body["error"]["code"] == code
        assert body["error"]["message"] == exc.message
        assert body["error"]["details"] == exc.details

    @pytest.mark.asyncio
    async def test_request_validation_error_returns_400(self, client):
        """Pydantic validation failures become 400 VALIDATION_ERROR."""
        response = await client.post(
            "/api/v1/auth/login", json={"email": "not-an-email", "password": "x"}
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["loc"] == ["body", "email"]
        assert "input" not in error["details"][0]

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_generic_500(self, app, client):
        """Unexpected exceptions are logged and hidden behind a generic 500."""

        @app.get("/test/boom")
        async def boom():
            raise RuntimeError("database password is hunter2")

        with patch("app.main.logger") as mock_logger:
            response = await client.get("/test/boom")

        assert response.status_code == 500
        assert response.json()["error"] == {
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": None,
        }
        assert "hunter2" not in response.text
        mock_logger.exception.assert_called_once()


class TestSecurityHeaders:
    """Tests for SecurityHeadersMiddleware."""

    @pytest.mark.asyncio
    async def test_standard_headers_present(self, client):
        """Every response carries the baseline security headers."""
        response = await client.get("/health")
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]

    @pytest.mark.asyncio
    async def test_api_responses_are_not_cached(self, client):
        """API responses carry Cache-Control: no-store."""
        response = await client.get("/api/v1/todos")
        assert response.headers["Cache-Control"] == "no-store, max-age=0"

    @pytest.mark.asyncio
    async def test_no_hsts_outside_production(self, client):
        """HSTS is only sent in production."""
        response = await client.get("/health")
        assert "Strict-Transport-Security" not in response.headers


class TestCORS:
    """Tests for CORS configuration."""

    @pytest.mark.asyncio
    async def test_preflight_allows_configured_origin_with_credentials(self, client):
        """The browser client's origin may send cookies."""
        response = await client.options(
            "/api/v1/todos",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.headers["access-control-allow-credentials"] == "true"

    @pytest.mark.asyncio
    async def test_unknown_origin_not_allowed(self, client):
        """Other origins get no CORS grant."""
        response = await client.get("/health", headers={"Origin": "https://evil.example"})
        assert "access-control-allow-origin" not in response.headers
