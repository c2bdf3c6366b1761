from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class CrosscheckRun(Base):
    """One invocation of the fingerprint crosscheck.

    Stores the options that shaped the comparison and the number of pairs
    that did not relate as expected, which decides the exit status.
    """

    __tablename__ = "crosscheck_runs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    data_type: Mapped[str] = mapped_column(String(20), nullable=False)
    lod_threshold: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    expect_all_groups_to_match: Mapped[bool] = mapped_column(nullable=False, default=False)
    output_errors_only: Mapped[bool] = mapped_column(nullable=False, default=False)
    loss_of_het_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    engine: Mapped[str | None] = mapped_column(String(255), nullable=True)
    inputs_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    unexpected_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    date: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    metrics: Mapped[list["CrosscheckMetricRow"]] = relationship(
        back_populates="run", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return (
            f"<CrosscheckRun(id={self.id}, type={self.data_type}, "
            f"unexpected={self.unexpected_count})>"
        )
