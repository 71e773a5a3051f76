"""Tests for error responses and request ID propagation."""

import pytest
import structlog
from httpx import AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from qrinsights.core import analytics
from qrinsights.core.errors import (
    AppError,
    DatabaseError,
    ErrorDetail,
    InternalError,
    ValidationError,
)
from qrinsights.core.logging import set_request_id


class TestErrorClasses:
    """Test custom exception classes."""

    def test_validation_error_is_client_error(self):
        exc = ValidationError("Serial number is required", details={"field": "serialNumber"})

        assert exc.code == "VALIDATION_ERROR"
        assert exc.status_code == 400
        response = exc.to_response()
        assert isinstance(response, ErrorDetail)
        assert response.error == "Serial number is required"

    def test_database_error_is_server_error(self):
        exc = DatabaseError("connection refused")

        assert exc.status_code == 500
        assert exc.to_response().model_dump(exclude_none=True) == {
            "error": "connection refused",
            "code": "DATABASE_ERROR",
        }

    def test_internal_error_default_message(self):
        exc = InternalError()

        assert isinstance(exc, AppError)
        assert exc.code == "INTERNAL_ERROR"
        assert exc.message == "Internal server error"


class TestStoreFailures:
    """Store failures surface as 500 with the underlying message."""

    @pytest.mark.asyncio
    async def test_query_failure_returns_500(self, client: AsyncClient, db_session: AsyncSession):
        await db_session.execute(text("DROP TABLE qr_codes"))

        response = await client.get(
            "/api/analytics/search-qr", params={"serialNumber": "NCRJ000000000001"}
        )

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "DATABASE_ERROR"
        assert "qr_codes" in body["error"]

    @pytest.mark.asyncio
    async def test_failed_report_is_not_cached(
        self, client: AsyncClient, monkeypatch, result_cache
    ):
        original = analytics.compute_stats

        async def failing_stats(db, filters, now=None):
            raise OperationalError("SELECT ...", {}, Exception("store unreachable"))

        monkeypatch.setattr(analytics, "compute_stats", failing_stats)
        response = await client.get("/api/analytics/stats")

        assert response.status_code == 500
        assert response.json()["error"] == "store unreachable"
        assert len(result_cache) == 0

        monkeypatch.setattr(analytics, "compute_stats", original)
        response = await client.get("/api/analytics/stats")

        assert response.status_code == 200
        assert len(result_cache) == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_500(self, client: AsyncClient, monkeypatch):
        async def broken_brands(db):
            raise RuntimeError("boom")

        monkeypatch.setattr(analytics, "list_brands", broken_brands)

        response = await client.get("/api/analytics/brands")

        assert response.status_code == 500
        assert response.json() == {"error": "boom", "code": "INTERNAL_ERROR"}

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_cors_and_request_id_headers(
        self, client: AsyncClient, monkeypatch
    ):
        async def broken_brands(db):
            raise RuntimeError("boom")

        monkeypatch.setattr(analytics, "list_brands", broken_brands)

        response = await client.get(
            "/api/analytics/brands",
            headers={"Origin": "http://dashboard.example.com", "X-Request-ID": "rid-1"},
        )

        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["x-request-id"] == "rid-1"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_body(self, client: AsyncClient):
        response = await client.get("/api/analytics/nope")

        assert response.status_code == 404
        assert "error" in response.json()


class TestRequestId:
    """Request ID propagation."""

    def test_request_id_is_bound_to_log_context(self):
        structlog.contextvars.bind_contextvars(stale="previous-request")

        set_request_id("abc-123")

        assert structlog.contextvars.get_contextvars() == {"request_id": "abc-123"}
        structlog.contextvars.clear_contextvars()

    @pytest.mark.asyncio
    async def test_request_id_header_is_echoed(self, client: AsyncClient):
        response = await client.get("/api/analytics/districts", headers={"X-Request-ID": "req-42"})

        assert response.headers["x-request-id"] == "req-42"

    @pytest.mark.asyncio
    async def test_request_id_generated_when_absent(self, client: AsyncClient):
        response = await client.get("/api/analytics/districts")

        assert len(response.headers["x-request-id"]) == 36
