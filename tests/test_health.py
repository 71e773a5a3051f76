"""Tests for the health check and service banner."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from qrinsights.api.health import get_uptime_seconds, set_app_start_time


class TestHealthCheckEndpoint:
    """Test suite for /health endpoint."""

    @pytest.mark.asyncio
    async def test_health_endpoint_returns_200_when_db_ok(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["uptime_seconds"] >= 0
        assert data["checks"]["database"]["status"] == "ok"
        assert isinstance(data["checks"]["database"]["response_time_ms"], int)

    @pytest.mark.asyncio
    async def test_health_reports_cache_counters(self, client: AsyncClient) -> None:
        await client.get("/api/analytics/stats")
        await client.get("/api/analytics/stats")

        cache = (await client.get("/health")).json()["checks"]["cache"]

        assert cache == {
            "size": 1,
            "max_entries": 100,
            "ttl_seconds": 60,
            "hits": 1,
            "misses": 1,
        }

    def test_health_endpoint_uptime_tracking(self) -> None:
        set_app_start_time(datetime.now() - timedelta(hours=1))

        uptime = get_uptime_seconds()

        assert 3590 <= uptime <= 3610, f"Expected ~3600 seconds, got {uptime}"


@pytest.mark.asyncio
async def test_index_lists_analytics_endpoints(client: AsyncClient) -> None:
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["endpoints"]["stats"] == "/api/analytics/stats"
    assert data["endpoints"]["searchQr"] == "/api/analytics/search-qr"
