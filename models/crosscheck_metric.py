from __future__ import annotations

from sqlalchemy import Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class CrosscheckMetricRow(Base):
    """A single compared pair from a crosscheck run."""

    __tablename__ = "crosscheck_metrics"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("crosscheck_runs.id"), nullable=False
    )
    # Position in pair-enumeration order
    pair_index: Mapped[int] = mapped_column(Integer, nullable=False)

    result: Mapped[str] = mapped_column(String(30), nullable=False)
    data_type: Mapped[str] = mapped_column(String(20), nullable=False)
    lod_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    lod_score_tumor_normal: Mapped[float | None] = mapped_column(Float, nullable=True)
    lod_score_normal_tumor: Mapped[float | None] = mapped_column(Float, nullable=True)

    left_run_barcode: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    left_lane: Mapped[int] = mapped_column(Integer, nullable=False, default=-1)
    left_molecular_barcode_sequence: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    left_library: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    left_sample: Mapped[str] = mapped_column(String(255), nullable=False)

    right_run_barcode: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    right_lane: Mapped[int] = mapped_column(Integer, nullable=False, default=-1)
    right_molecular_barcode_sequence: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    right_library: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    right_sample: Mapped[str] = mapped_column(String(255), nullable=False)

    run: Mapped["CrosscheckRun"] = relationship(back_populates="metrics")

    __table_args__ = (
        Index("ix_crosscheck_metrics_run_id", "run_id"),
        Index("ix_crosscheck_metrics_result", "result"),
    )

    def __repr__(self) -> str:
        return (
            f"<CrosscheckMetricRow({self.left_sample} vs {self.right_sample}, "
            f"{self.result}, LOD={self.lod_score})>"
        )
