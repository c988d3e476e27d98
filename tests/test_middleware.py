"""Middleware tests: request ID, CORS, logging, error handling."""

import logging

import pytest
from httpx import AsyncClient

from lcc.config import Settings
from lcc.middleware.logging import setup_logging


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    """Request ID is auto-generated when not provided."""
    response = await client.get("/health")
    assert "x-request-id" in response.headers
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    """Custom request ID is echoed back in response."""
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    """CORS preflight returns access-control-allow-origin for configured origin."""
    response = await client.options(
        "/health",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert "access-control-allow-origin" in response.headers


@pytest.mark.asyncio
async def test_404_returns_json(client: AsyncClient) -> None:
    """Unknown paths return 404 with JSON body."""
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    data = response.json()
    assert data["success"] is False
    assert data["detail"] == "Not Found"


@pytest.mark.asyncio
async def test_domain_error_shape(client: AsyncClient) -> None:
    """Domain errors map to their status with a stable error code."""
    response = await client.post("/api/v1/quests/ghost/claim", json={"quest_id": "lemon-picker"})
    assert response.status_code == 404
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {
        "success": False,
        "error": "user_not_found",
        "detail": "User not found, please login",
    }


@pytest.mark.asyncio
async def test_request_validation_shape(client: AsyncClient) -> None:
    """Malformed bodies return 422 with the validation error list."""
    response = await client.post("/api/v1/register", json={"username": "alice"})
    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "validation_error"
    assert data["errors"]


@pytest.mark.asyncio
async def test_request_id_on_domain_error(client: AsyncClient) -> None:
    """Failed calls still carry the id the client sent, so it can be quoted back."""
    response = await client.post(
        "/api/v1/quests/ghost/claim",
        json={"quest_id": "lemon-picker"},
        headers={"X-Request-Id": "claim-42"},
    )
    assert response.status_code == 404
    assert response.headers["x-request-id"] == "claim-42"


@pytest.mark.asyncio
async def test_cors_exposes_request_id(client: AsyncClient) -> None:
    """The web client origin may read the request id header."""
    response = await client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert "x-request-id" in response.headers["access-control-expose-headers"].lower()


@pytest.mark.asyncio
async def test_cors_rejects_unknown_origin(client: AsyncClient) -> None:
    response = await client.options(
        "/health",
        headers={
            "Origin": "http://evil.test",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert "access-control-allow-origin" not in response.headers


def test_log_level_applies_to_service_loggers() -> None:
    service_logger = logging.getLogger("lcc")
    previous = service_logger.level
    try:
        setup_logging(Settings(log_level="warning", log_format="console"))
        assert service_logger.level == logging.WARNING
        assert not logging.getLogger("lcc.quests.tracker").isEnabledFor(logging.INFO)
    finally:
        service_logger.setLevel(previous)
