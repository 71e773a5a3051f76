"""State reference table."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from qrinsights.core.db import Base


class State(Base):
    """A state that QR batches are generated for."""

    __tablename__ = "states"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    state_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )

    state_code: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<State {self.state_code}: {self.state_name}>"
