"""QRCode model: a single generated code."""

from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from qrinsights.core.db import Base
from qrinsights.utils.datetime import now_utc_naive


class QRCode(Base):
    """
    One QR code.

    `serial_number` is the human-facing identifier (e.g. "NCRJ000000000001");
    `serial_number_num` is its numeric part, used for per-batch range queries.
    """

    __tablename__ = "qr_codes"
    __table_args__ = (
        Index("idx_stateid_serial", "state_id", "serial_number"),
        Index("idx_batch_serial_num", "batch_id", "serial_number_num"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    serial_number: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        index=True,
    )

    serial_number_num: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )

    code: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    state_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("states.id"),
        nullable=True,
    )

    state_code: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
    )

    brand_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("brands.id"),
        nullable=True,
    )

    batch_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("qr_batches.id"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc_naive,
    )

    def __repr__(self) -> str:
        return self.serial_number
