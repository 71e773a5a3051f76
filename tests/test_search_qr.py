"""Tests for /api/analytics/search-qr."""

import re

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import BatchFactory, BrandFactory, QRCodeFactory, StateFactory

SEARCH_TIME = re.compile(r"^\d+ms$")


@pytest.fixture
async def search_data(db_session: AsyncSession):
    rajasthan = await StateFactory.create(db_session, "Rajasthan", "RJ")
    gujarat = await StateFactory.create(db_session, "Gujarat", "GJ")
    brand = await BrandFactory.create(db_session, "Royal Reserve", "RR")
    batch = await BatchFactory.create(
        db_session, rajasthan, brand, total_codes=3, batch_code="B202603100001"
    )
    codes = await QRCodeFactory.create_run(db_session, batch, rajasthan, start=1, count=3)
    return {"rajasthan": rajasthan, "gujarat": gujarat, "brand": brand, "batch": batch, "codes": codes}


class TestSearchQR:
    """Point lookup by serial number."""

    @pytest.mark.asyncio
    async def test_missing_serial_is_client_error(self, client: AsyncClient):
        response = await client.get("/api/analytics/search-qr")

        assert response.status_code == 400
        assert response.json()["error"] == "Serial number is required"

    @pytest.mark.asyncio
    async def test_blank_serial_is_client_error(self, client: AsyncClient):
        response = await client.get("/api/analytics/search-qr", params={"serialNumber": "  "})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, search_data, result_cache):
        response = await client.get(
            "/api/analytics/search-qr", params={"serialNumber": "NCRJ000000000099"}
        )

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"found", "message", "searchTime"}
        assert data["found"] is False
        assert data["message"] == "QR code not found"
        assert SEARCH_TIME.match(data["searchTime"])
        assert len(result_cache) == 0

    @pytest.mark.asyncio
    async def test_not_found_on_empty_store(self, client: AsyncClient, result_cache):
        response = await client.get(
            "/api/analytics/search-qr", params={"serialNumber": "NCRJ000000000001"}
        )

        data = response.json()
        assert data["found"] is False
        assert data["message"] == "QR code not found"
        assert SEARCH_TIME.match(data["searchTime"])
        assert len(result_cache) == 0

    @pytest.mark.asyncio
    async def test_found_with_denormalized_details(self, client: AsyncClient, search_data):
        rajasthan, brand, batch = search_data["rajasthan"], search_data["brand"], search_data["batch"]
        code = search_data["codes"][1]

        response = await client.get(
            "/api/analytics/search-qr", params={"serialNumber": "NCRJ000000000002"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["found"] is True
        assert SEARCH_TIME.match(data["searchTime"])
        detail = data["data"]
        assert detail["id"] == code.id
        assert detail["serialNumber"] == "NCRJ000000000002"
        assert detail["serialNumberNum"] == 2
        assert detail["code"] == "https://verify.example.com/q/NCRJ000000000002"
        assert detail["state"] == {"id": rajasthan.id, "name": "Rajasthan", "code": "RJ"}
        assert detail["brand"] == {"id": brand.id, "name": "Royal Reserve"}
        assert detail["batch"] == {"id": batch.id, "code": "B202603100001", "totalCodes": 3}
        assert detail["exists"] is True
        assert "createdAt" in detail

    @pytest.mark.asyncio
    async def test_state_id_narrows_search(self, client: AsyncClient, search_data):
        serial = {"serialNumber": "NCRJ000000000001"}

        in_state = await client.get(
            "/api/analytics/search-qr", params={**serial, "stateId": str(search_data["rajasthan"].id)}
        )
        other_state = await client.get(
            "/api/analytics/search-qr", params={**serial, "stateId": str(search_data["gujarat"].id)}
        )
        any_state = await client.get("/api/analytics/search-qr", params={**serial, "stateId": "all"})

        assert in_state.json()["found"] is True
        assert other_state.json()["found"] is False
        assert any_state.json()["found"] is True

    @pytest.mark.asyncio
    async def test_search_is_never_cached(
        self, client: AsyncClient, search_data, query_counter, result_cache
    ):
        query_counter.reset()
        for _ in range(3):
            await client.get("/api/analytics/search-qr", params={"serialNumber": "NCRJ000000000001"})

        assert query_counter.count == 3
        assert len(result_cache) == 0
