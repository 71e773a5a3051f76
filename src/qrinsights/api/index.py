"""Service banner listing the analytics endpoints."""

from fastapi import APIRouter

from qrinsights.core.db import engine

router = APIRouter(tags=["index"])

ANALYTICS_ENDPOINTS = {
    "stats": "/api/analytics/stats",
    "timeseries": "/api/analytics/timeseries",
    "byLocation": "/api/analytics/by-location",
    "recentBatches": "/api/analytics/recent-batches",
    "batchDetails": "/api/analytics/batch-details",
    "states": "/api/analytics/states",
    "districts": "/api/analytics/districts",
    "brands": "/api/analytics/brands",
    "searchQr": "/api/analytics/search-qr",
}


@router.get("/")
async def index() -> dict:
    return {
        "status": "ok",
        "message": "QR Analytics API Server",
        "database": engine.dialect.name,
        "endpoints": ANALYTICS_ENDPOINTS,
    }
