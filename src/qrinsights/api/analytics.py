"""Analytics API consumed by the dashboard charts, tables and search modal."""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from qrinsights.core import analytics
from qrinsights.core.cache import ResultCache, get_result_cache, make_cache_key
from qrinsights.core.db import get_db
from qrinsights.core.errors import ValidationError
from qrinsights.core.filters import ReportFilters, normalize_state_id
from qrinsights.core.logging import get_logger
from qrinsights.models.analytics_schemas import (
    BatchDetail,
    BrandTotal,
    LocationTotal,
    QRSearchFound,
    QRSearchNotFound,
    RecentBatch,
    StatsSummary,
    TimeseriesPoint,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

# Numeric filters are taken as raw strings: bad input falls back to a default
# (see core.filters.FILTER_DEFAULTS) instead of failing validation.
StateParam = Query(None, description='State name; "All States" means no filter')
DaysParam = Query(None, description="Trailing window in days (default 30)")
LimitParam = Query(None, description="Maximum rows")


@router.get("/stats", response_model=StatsSummary)
async def get_stats(
    state: Optional[str] = StateParam,
    days: Optional[str] = DaysParam,
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> StatsSummary:
    """Total codes and batches in the window, with change vs. the previous window."""
    filters = ReportFilters.parse("stats", state=state, days=days)
    cache_key = make_cache_key("stats", filters.state, filters.days)

    result = await cache.get_or_compute(
        cache_key, lambda: analytics.compute_stats(db, filters)
    )
    logger.info(
        "analytics.stats",
        total_qr_codes=result.total_qr_codes,
        total_batches=result.total_batches,
    )
    return result


@router.get("/timeseries", response_model=list[TimeseriesPoint])
async def get_timeseries(
    state: Optional[str] = StateParam,
    days: Optional[str] = DaysParam,
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> list[TimeseriesPoint]:
    """Codes per day, oldest first."""
    filters = ReportFilters.parse("timeseries", state=state, days=days)
    cache_key = make_cache_key("timeseries", filters.state, filters.days)

    result = await cache.get_or_compute(
        cache_key, lambda: analytics.compute_timeseries(db, filters)
    )
    logger.info("analytics.timeseries", points=len(result))
    return result


@router.get("/by-location", response_model=list[LocationTotal])
async def get_by_location(
    state: Optional[str] = StateParam,
    limit: Optional[str] = LimitParam,
    days: Optional[str] = DaysParam,
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> list[LocationTotal]:
    """Codes per state, largest first."""
    filters = ReportFilters.parse("by-location", state=state, days=days, limit=limit)
    cache_key = make_cache_key("location", filters.state, filters.limit, filters.days)

    result = await cache.get_or_compute(
        cache_key, lambda: analytics.compute_by_location(db, filters)
    )
    logger.info("analytics.by_location", locations=len(result))
    return result


@router.get("/recent-batches", response_model=list[RecentBatch])
async def get_recent_batches(
    state: Optional[str] = StateParam,
    limit: Optional[str] = LimitParam,
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> list[RecentBatch]:
    """Latest batches with a relative "time ago" label."""
    filters = ReportFilters.parse("recent-batches", state=state, limit=limit)
    cache_key = make_cache_key("recent-batches", filters.state, filters.limit)

    result = await cache.get_or_compute(
        cache_key, lambda: analytics.fetch_recent_batches(db, filters)
    )
    logger.info("analytics.recent_batches", items=len(result))
    return result


@router.get("/batch-details", response_model=list[BatchDetail])
async def get_batch_details(
    state: Optional[str] = StateParam,
    limit: Optional[str] = LimitParam,
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> list[BatchDetail]:
    """Latest batches with their serial number range."""
    filters = ReportFilters.parse("batch-details", state=state, limit=limit)
    cache_key = make_cache_key("batch-details", filters.state, filters.limit)

    result = await cache.get_or_compute(
        cache_key, lambda: analytics.fetch_batch_details(db, filters)
    )
    logger.info("analytics.batch_details", batches=len(result))
    return result


@router.get("/states", response_model=list[str])
async def get_states(db: AsyncSession = Depends(get_db)) -> list[str]:
    """State names for the filter dropdown."""
    states = await analytics.list_states(db)
    logger.info("analytics.states", items=len(states))
    return states


@router.get("/districts", response_model=list[str])
async def get_districts(state: Optional[str] = StateParam) -> list[str]:
    """The store carries no district data; always empty."""
    logger.info("analytics.districts", state=state or "all", items=0)
    return []


@router.get("/brands", response_model=list[BrandTotal])
async def get_brands(db: AsyncSession = Depends(get_db)) -> list[BrandTotal]:
    """Top brands by codes generated."""
    brands = await analytics.list_brands(db)
    logger.info("analytics.brands", items=len(brands))
    return brands


@router.get("/search-qr", response_model=Union[QRSearchFound, QRSearchNotFound])
async def search_qr(
    serial_number: Optional[str] = Query(None, alias="serialNumber"),
    state_id: Optional[str] = Query(None, alias="stateId"),
    db: AsyncSession = Depends(get_db),
) -> Union[QRSearchFound, QRSearchNotFound]:
    """
    Look up a single QR code by serial number.

    Never cached. `stateId` narrows the lookup; "all" or a missing value
    searches every state.
    """
    if not serial_number or not serial_number.strip():
        raise ValidationError("Serial number is required", details={"field": "serialNumber"})

    serial_number = serial_number.strip()
    logger.info("analytics.search", serial_number=serial_number, state_id=state_id or "all")
    return await analytics.search_qr_code(db, serial_number, normalize_state_id(state_id))
