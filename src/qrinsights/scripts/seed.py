"""Seed script for QR Insights demo data."""

import asyncio
import random
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qrinsights.core.db import AsyncSessionLocal, Base, engine
from qrinsights.core.logging import configure_logging, get_logger
from qrinsights.models import Batch, Brand, QRCode, State
from qrinsights.utils.datetime import now_utc

logger = get_logger(__name__)

STATES = [
    ("Delhi", "DL"),
    ("Gujarat", "GJ"),
    ("Karnataka", "KA"),
    ("Maharashtra", "MH"),
    ("Rajasthan", "RJ"),
    ("Tamil Nadu", "TN"),
]

BRANDS = [
    ("Royal Reserve", "RR"),
    ("Blue Label", "BL"),
    ("Golden Oak", "GO"),
    ("Silver Peak", "SP"),
]

BATCH_COUNT = 120
# Codes materialized per batch; total_codes reports the full generated size
CODES_PER_BATCH = 25


async def seed_states(db: AsyncSession) -> list[State]:
    """Create reference states once."""
    existing = list((await db.scalars(select(State))).all())
    if existing:
        logger.info("seed.states.skipped", count=len(existing))
        return existing

    states = [State(state_name=name, state_code=code) for name, code in STATES]
    db.add_all(states)
    await db.flush()
    logger.info("seed.states.created", count=len(states))
    return states


async def seed_brands(db: AsyncSession) -> list[Brand]:
    """Create reference brands once."""
    existing = list((await db.scalars(select(Brand))).all())
    if existing:
        logger.info("seed.brands.skipped", count=len(existing))
        return existing

    brands = [Brand(brand_name=name, brand_code=code) for name, code in BRANDS]
    db.add_all(brands)
    await db.flush()
    logger.info("seed.brands.created", count=len(brands))
    return brands


async def seed_batches(db: AsyncSession, states: list[State], brands: list[Brand]) -> int:
    """Create batches spread over the last 60 days, each with a run of serials."""
    if await db.scalar(select(Batch.id).limit(1)) is not None:
        logger.info("seed.batches.skipped")
        return 0

    now = now_utc()
    serial_counters = {state.id: 0 for state in states}

    for index in range(BATCH_COUNT):
        state = random.choice(states)
        brand = random.choice(brands)
        created_at = now - timedelta(minutes=random.randint(5, 60 * 24 * 60))
        batch = Batch(
            batch_code=f"B{created_at:%Y%m%d}{index:04d}",
            state_id=state.id,
            brand_id=brand.id,
            total_codes=random.choice([500, 1000, 2500, 5000, 10000]),
            created_at=created_at,
        )
        db.add(batch)
        await db.flush()

        codes = []
        for _ in range(CODES_PER_BATCH):
            serial_counters[state.id] += 1
            serial_num = serial_counters[state.id]
            serial = f"NC{state.state_code}{serial_num:012d}"
            codes.append(
                QRCode(
                    serial_number=serial,
                    serial_number_num=serial_num,
                    code=f"https://verify.example.com/q/{serial}",
                    state_id=state.id,
                    state_code=state.state_code,
                    brand_id=brand.id,
                    batch_id=batch.id,
                    created_at=created_at,
                )
            )
        db.add_all(codes)

    await db.flush()
    logger.info("seed.batches.created", count=BATCH_COUNT, codes=BATCH_COUNT * CODES_PER_BATCH)
    return BATCH_COUNT


async def seed(create_tables: bool = False) -> None:
    """Populate demo data; optionally create the schema first (SQLite dev setups)."""
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        states = await seed_states(db)
        brands = await seed_brands(db)
        await seed_batches(db, states, brands)
        await db.commit()


def main() -> None:
    """Console entrypoint: qr-insights-seed."""
    import sys

    configure_logging()
    asyncio.run(seed(create_tables="--create-tables" in sys.argv))


if __name__ == "__main__":
    main()
