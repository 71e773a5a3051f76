"""Brand reference table."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from qrinsights.core.db import Base


class Brand(Base):
    __tablename__ = "brands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    brand_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    brand_code: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    def __repr__(self) -> str:
        return self.brand_name
