"""Aggregate queries behind the analytics dashboard.

Every report sums `qr_batches.total_codes` rather than counting `qr_codes`;
the codes table is only touched for the per-batch fallbacks (count, serial
range), always restricted to an explicit list of batch ids, and for the
serial-number lookup.
"""

import time
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from qrinsights.core.filters import ReportFilters
from qrinsights.core.logging import get_logger
from qrinsights.models import Batch, Brand, QRCode, State
from qrinsights.models.analytics_schemas import (
    BatchDetail,
    BrandTotal,
    LocationTotal,
    QRCodeDetail,
    QRSearchFound,
    QRSearchNotFound,
    RecentBatch,
    SearchBatch,
    SearchBrand,
    SearchState,
    StatsSummary,
    TimeseriesPoint,
)
from qrinsights.utils.datetime import now_utc, relative_time_label, to_iso_date

logger = get_logger(__name__)

TIMESERIES_MAX_POINTS = 30
BRANDS_LIMIT = 20


def percentage_change(current: int, previous: int) -> float:
    """Relative change in percent, one decimal; 0 when there is no previous volume."""
    if not previous:
        return 0.0
    change = (Decimal(current) - Decimal(previous)) / Decimal(previous) * 100
    return float(change.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


async def resolve_state_id(db: AsyncSession, state: Optional[str]) -> Optional[int]:
    """Look up a state id by name. Unknown names resolve to None (no filter)."""
    if not state:
        return None
    state_id = await db.scalar(select(State.id).where(State.state_name == state).limit(1))
    if state_id is None:
        logger.info("analytics.state_filter.unknown", state=state)
    return state_id


def _state_clause(state_id: Optional[int]) -> list:
    return [Batch.state_id == state_id] if state_id is not None else []


async def _window_totals(
    db: AsyncSession,
    state_id: Optional[int],
    start: datetime,
    end: Optional[datetime] = None,
) -> tuple[int, int]:
    """Sum of codes and number of batches created in [start, end)."""
    conditions = [Batch.created_at >= start, *_state_clause(state_id)]
    if end is not None:
        conditions.append(Batch.created_at < end)

    row = (
        await db.execute(
            select(
                func.coalesce(func.sum(Batch.total_codes), 0).label("codes"),
                func.count(Batch.id).label("batches"),
            ).where(*conditions)
        )
    ).one()
    return int(row.codes or 0), int(row.batches or 0)


async def compute_stats(
    db: AsyncSession, filters: ReportFilters, now: Optional[datetime] = None
) -> StatsSummary:
    """Totals for the trailing window and their change vs. the window before it."""
    now = now or now_utc()
    state_id = await resolve_state_id(db, filters.state)
    current_start = now - timedelta(days=filters.days)
    previous_start = now - timedelta(days=filters.days * 2)

    total_codes, total_batches = await _window_totals(db, state_id, current_start)
    previous_codes, previous_batches = await _window_totals(
        db, state_id, previous_start, current_start
    )

    return StatsSummary(
        total_qr_codes=total_codes,
        total_batches=total_batches,
        qr_percentage_change=percentage_change(total_codes, previous_codes),
        batch_percentage_change=percentage_change(total_batches, previous_batches),
    )


async def compute_timeseries(
    db: AsyncSession, filters: ReportFilters, now: Optional[datetime] = None
) -> list[TimeseriesPoint]:
    """Codes per calendar day in the window, oldest day first."""
    now = now or now_utc()
    state_id = await resolve_state_id(db, filters.state)

    day = func.date(Batch.created_at).label("day")
    stmt = (
        select(day, func.coalesce(func.sum(Batch.total_codes), 0).label("codes"))
        .where(Batch.created_at >= now - timedelta(days=filters.days), *_state_clause(state_id))
        .group_by(day)
        .order_by(desc("day"))
        .limit(TIMESERIES_MAX_POINTS)
    )
    rows = (await db.execute(stmt)).all()

    # Fetched newest-first so the cap keeps the most recent days
    return [
        TimeseriesPoint(date=to_iso_date(row.day), codes=int(row.codes or 0))
        for row in reversed(rows)
    ]


async def compute_by_location(
    db: AsyncSession, filters: ReportFilters, now: Optional[datetime] = None
) -> list[LocationTotal]:
    """Codes per state in the window, largest first."""
    now = now or now_utc()
    state_id = await resolve_state_id(db, filters.state)

    codes = func.coalesce(func.sum(Batch.total_codes), 0).label("codes")
    stmt = (
        select(State.state_name.label("state"), codes)
        .select_from(Batch)
        .join(State, Batch.state_id == State.id)
        .where(Batch.created_at >= now - timedelta(days=filters.days), *_state_clause(state_id))
        .group_by(Batch.state_id, State.state_name)
        .order_by(desc("codes"), State.state_name)
        .limit(filters.limit)
    )
    rows = (await db.execute(stmt)).all()
    return [LocationTotal(state=row.state, codes=int(row.codes or 0)) for row in rows]


async def _latest_batches(
    db: AsyncSession, state_id: Optional[int], limit: int
) -> list[dict[str, Any]]:
    """Newest batches with state/brand names and a code count for each."""
    stmt = (
        select(
            Batch.id,
            State.state_name,
            State.state_code,
            Brand.brand_name,
            Batch.total_codes,
            Batch.created_at,
        )
        .select_from(Batch)
        .outerjoin(State, Batch.state_id == State.id)
        .outerjoin(Brand, Batch.brand_id == Brand.id)
        .where(*_state_clause(state_id))
        .order_by(Batch.created_at.desc(), Batch.id.desc())
        .limit(limit)
    )
    batches = [dict(row._mapping) for row in (await db.execute(stmt)).all()]

    # Batches without a stored total get counted, only for the ids on screen
    uncounted = [b["id"] for b in batches if b["total_codes"] is None]
    if uncounted:
        count_rows = (
            await db.execute(
                select(QRCode.batch_id, func.count(QRCode.id).label("count"))
                .where(QRCode.batch_id.in_(uncounted))
                .group_by(QRCode.batch_id)
            )
        ).all()
        counts = {row.batch_id: int(row.count) for row in count_rows}
        for batch in batches:
            if batch["total_codes"] is None:
                batch["total_codes"] = counts.get(batch["id"], 0)

    return batches


async def fetch_recent_batches(
    db: AsyncSession, filters: ReportFilters, now: Optional[datetime] = None
) -> list[RecentBatch]:
    """Most recent batches regardless of window, labelled with their age."""
    now = now or now_utc()
    state_id = await resolve_state_id(db, filters.state)
    batches = await _latest_batches(db, state_id, filters.limit)

    return [
        RecentBatch(
            id=batch["id"],
            state=batch["state_name"],
            state_code=batch["state_code"],
            brand=batch["brand_name"],
            qr_count=batch["total_codes"],
            created_at=batch["created_at"],
            time=relative_time_label(batch["created_at"], now),
        )
        for batch in batches
    ]


async def fetch_batch_details(db: AsyncSession, filters: ReportFilters) -> list[BatchDetail]:
    """Most recent batches with the first and last numeric serial of each."""
    state_id = await resolve_state_id(db, filters.state)
    batches = await _latest_batches(db, state_id, filters.limit)

    ranges: dict[int, Any] = {}
    ids = [batch["id"] for batch in batches]
    if ids:
        range_rows = (
            await db.execute(
                select(
                    QRCode.batch_id,
                    func.min(QRCode.serial_number_num).label("start_serial"),
                    func.max(QRCode.serial_number_num).label("end_serial"),
                )
                .where(QRCode.batch_id.in_(ids))
                .group_by(QRCode.batch_id)
            )
        ).all()
        ranges = {row.batch_id: row for row in range_rows}

    details = []
    for batch in batches:
        serial_range = ranges.get(batch["id"])
        details.append(
            BatchDetail(
                id=batch["id"],
                state=batch["state_name"],
                state_code=batch["state_code"],
                brand=batch["brand_name"],
                qr_count=batch["total_codes"],
                created_at=batch["created_at"],
                created_at_camel=batch["created_at"],
                start_serial=serial_range.start_serial if serial_range else None,
                end_serial=serial_range.end_serial if serial_range else None,
            )
        )
    return details


async def list_states(db: AsyncSession) -> list[str]:
    """All state names, alphabetical."""
    stmt = (
        select(State.state_name)
        .where(State.state_name.is_not(None))
        .distinct()
        .order_by(State.state_name)
    )
    return list((await db.scalars(stmt)).all())


async def list_brands(db: AsyncSession) -> list[BrandTotal]:
    """Brands ranked by total codes generated; brands without batches count 0."""
    qr_count = func.coalesce(func.sum(Batch.total_codes), 0).label("qr_count")
    stmt = (
        select(Brand.brand_name.label("name"), qr_count)
        .select_from(Brand)
        .outerjoin(Batch, Batch.brand_id == Brand.id)
        .group_by(Brand.id, Brand.brand_name)
        .order_by(desc("qr_count"), Brand.brand_name)
        .limit(BRANDS_LIMIT)
    )
    rows = (await db.execute(stmt)).all()
    return [BrandTotal(name=row.name, qr_count=int(row.qr_count or 0)) for row in rows]


async def search_qr_code(
    db: AsyncSession, serial_number: str, state_id: Optional[int] = None
) -> Union[QRSearchFound, QRSearchNotFound]:
    """
    Exact lookup of one code by serial number.

    With a state id the lookup uses the (state_id, serial_number) index.
    Absence is a normal result, not an error.
    """
    stmt = (
        select(
            QRCode,
            State.state_name,
            Brand.brand_name,
            Batch.batch_code,
            Batch.total_codes.label("batch_total_codes"),
        )
        .select_from(QRCode)
        .outerjoin(State, QRCode.state_id == State.id)
        .outerjoin(Brand, QRCode.brand_id == Brand.id)
        .outerjoin(Batch, QRCode.batch_id == Batch.id)
        .where(QRCode.serial_number == serial_number)
        .limit(1)
    )
    if state_id is not None:
        stmt = stmt.where(QRCode.state_id == state_id)

    start = time.perf_counter()
    row = (await db.execute(stmt)).first()
    search_time = f"{int((time.perf_counter() - start) * 1000)}ms"

    if row is None:
        logger.info(
            "analytics.search.not_found",
            serial_number=serial_number,
            state_id=state_id,
            search_time=search_time,
        )
        return QRSearchNotFound(search_time=search_time)

    qr = row.QRCode
    logger.info(
        "analytics.search.found",
        serial_number=qr.serial_number,
        state=row.state_name,
        search_time=search_time,
    )
    return QRSearchFound(
        search_time=search_time,
        data=QRCodeDetail(
            id=qr.id,
            serial_number=qr.serial_number,
            serial_number_num=qr.serial_number_num,
            code=qr.code,
            state=SearchState(id=qr.state_id, name=row.state_name, code=qr.state_code),
            brand=SearchBrand(id=qr.brand_id, name=row.brand_name),
            batch=SearchBatch(
                id=qr.batch_id, code=row.batch_code, total_codes=row.batch_total_codes
            ),
            created_at=qr.created_at,
        ),
    )
