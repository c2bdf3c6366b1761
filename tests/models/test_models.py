"""Tests for SQLAlchemy database models."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

# Add project root to path
PROJECT_ROOT = str(Path(__file__).resolve().parent.parent.parent)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from models import CrosscheckMetricRow, CrosscheckRun


def _metric_row(pair_index=0, **overrides):
    fields = dict(
        pair_index=pair_index,
        result="EXPECTED_MATCH",
        data_type="READGROUP",
        lod_score=12.3,
        lod_score_tumor_normal=11.0,
        lod_score_normal_tumor=13.1,
        left_run_barcode="H3JNVADXX",
        left_lane=1,
        left_molecular_barcode_sequence="ACGT",
        left_library="Solexa-1",
        left_sample="NA12891",
        right_run_barcode="H3JNVADXX",
        right_lane=2,
        right_molecular_barcode_sequence="ACGT",
        right_library="Solexa-1",
        right_sample="NA12891",
    )
    fields.update(overrides)
    return CrosscheckMetricRow(**fields)


class TestCrosscheckRunModel:
    """Tests for CrosscheckRun model."""

    def test_create_run(self, test_db):
        """Test creating a CrosscheckRun instance."""
        run = CrosscheckRun(data_type="SAMPLE", lod_threshold=0.0)
        test_db.add(run)
        test_db.commit()

        assert run.id is not None
        assert run.unexpected_count == 0
        assert run.expect_all_groups_to_match is False
        assert run.date is not None
        assert isinstance(run.date, datetime)

    def test_run_string_representation(self, sample_run):
        """Test CrosscheckRun __repr__ method."""
        assert repr(sample_run) == f"<CrosscheckRun(id={sample_run.id}, type=READGROUP, unexpected=0)>"

    def test_data_type_required(self, test_db):
        test_db.add(CrosscheckRun(lod_threshold=0.0))
        with pytest.raises(IntegrityError):
            test_db.commit()


class TestCrosscheckMetricRowModel:
    """Tests for CrosscheckMetricRow model."""

    def test_metrics_attached_to_run(self, test_db, sample_run):
        """Test metrics are reachable from their run in pair order."""
        sample_run.metrics.append(_metric_row(0))
        sample_run.metrics.append(_metric_row(1, result="UNEXPECTED_MISMATCH", lod_score=-8.0))
        test_db.commit()

        rows = test_db.scalars(
            select(CrosscheckMetricRow)
            .where(CrosscheckMetricRow.run_id == sample_run.id)
            .order_by(CrosscheckMetricRow.pair_index)
        ).all()
        assert [r.result for r in rows] == ["EXPECTED_MATCH", "UNEXPECTED_MISMATCH"]
        assert rows[1].run is sample_run

    def test_cleared_fields_defaults(self, test_db, sample_run):
        """Test cleared identity fields are stored as empty / -1."""
        row = CrosscheckMetricRow(
            pair_index=0,
            result="INCONCLUSIVE",
            data_type="SAMPLE",
            left_sample="NA12891",
            right_sample="NA12892",
        )
        sample_run.metrics.append(row)
        test_db.commit()

        assert row.left_lane == -1
        assert row.right_library == ""
        assert row.lod_score is None

    def test_metric_requires_run(self, test_db):
        """Test foreign key to crosscheck_runs is enforced."""
        row = _metric_row()
        row.run_id = 9999
        test_db.add(row)
        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_delete_run_cascades(self, test_db, sample_run):
        sample_run.metrics.extend([_metric_row(0), _metric_row(1)])
        test_db.commit()

        test_db.delete(sample_run)
        test_db.commit()

        assert test_db.scalars(select(CrosscheckMetricRow)).all() == []

    def test_metric_string_representation(self):
        row = _metric_row(lod_score=12.3)
        assert repr(row) == "<CrosscheckMetricRow(NA12891 vs NA12891, EXPECTED_MATCH, LOD=12.3)>"
