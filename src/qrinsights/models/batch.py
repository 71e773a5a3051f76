"""Batch model: a group of QR codes generated together."""

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from qrinsights.core.db import Base
from qrinsights.utils.datetime import now_utc_naive


class Batch(Base):
    """
    A batch of QR codes for one state and one brand.

    Rows are written by the generation service and never updated.
    `total_codes` is denormalized so reports can sum batches instead of
    counting codes; older batches may carry NULL there, in which case the
    count is taken from qr_codes.
    """

    __tablename__ = "qr_batches"
    __table_args__ = (Index("idx_batches_state_created", "state_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    batch_code: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
    )

    state_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("states.id"),
        nullable=True,
        index=True,
    )

    brand_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("brands.id"),
        nullable=True,
        index=True,
    )

    total_codes: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc_naive,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Batch {self.id} ({self.total_codes} codes)>"
