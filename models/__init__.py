"""Database models for the crosscheck pipeline."""

from models.base import Base
from models.crosscheck_metric import CrosscheckMetricRow
from models.crosscheck_run import CrosscheckRun

__all__ = [
    "Base",
    "CrosscheckMetricRow",
    "CrosscheckRun",
]
