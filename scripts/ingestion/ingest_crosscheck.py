"""Store crosscheck results in the SQLite database.

Uses SQLAlchemy models directly to ensure schema consistency. Called from
the crosscheck entry point when a database is configured, or from tests
with an in-memory session.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from fingerprinting.crosscheck import CrosscheckConfig, CrosscheckResult
from models.base import Base
from models.crosscheck_metric import CrosscheckMetricRow
from models.crosscheck_run import CrosscheckRun
from utils import safe_float

log = logging.getLogger(__name__)


def ingest_crosscheck(
    session: Session,
    result: CrosscheckResult,
    config: CrosscheckConfig,
    data_type: str,
    params: dict[str, Any] | None = None,
) -> CrosscheckRun:
    """Add a crosscheck run and its metrics to the session.

    The caller owns the transaction; the run is flushed so its id is set.

    Args:
        session: SQLAlchemy database session
        result: Output of the crosscheck driver
        config: Policy the crosscheck ran with
        data_type: Granularity of the compared entries
        params: Optional extra run details (engine, inputs)

    Returns:
        The new CrosscheckRun
    """
    params = params or {}
    inputs = params.get("inputs")

    run = CrosscheckRun(
        data_type=data_type,
        lod_threshold=config.lod_threshold,
        expect_all_groups_to_match=config.expect_all_groups_to_match,
        output_errors_only=config.output_errors_only,
        loss_of_het_rate=config.loss_of_het_rate,
        engine=params.get("engine"),
        inputs_json=json.dumps([str(i) for i in inputs]) if inputs else None,
        unexpected_count=result.unexpected_count,
    )

    for index, metric in enumerate(result.metrics):
        row = metric.as_dict()
        for score in ("lod_score", "lod_score_tumor_normal", "lod_score_normal_tumor"):
            row[score] = safe_float(row[score])
        run.metrics.append(CrosscheckMetricRow(pair_index=index, **row))

    session.add(run)
    session.flush()
    log.info(
        "Created CrosscheckRun id=%d (%d metric(s), %d unexpected)",
        run.id,
        len(run.metrics),
        run.unexpected_count,
    )
    return run


def write_to_database(
    database: str | Path,
    result: CrosscheckResult,
    config: CrosscheckConfig,
    data_type: str,
    params: dict[str, Any] | None = None,
) -> int:
    """Persist a crosscheck into a SQLite file, creating tables if needed.

    Returns:
        Id of the stored run
    """
    db_path = Path(database).resolve()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_url = f"sqlite:///{db_path}"
    log.info("Connecting to database: %s", db_url)

    engine = create_engine(db_url)
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    try:
        run = ingest_crosscheck(session, result, config, data_type, params)
        session.commit()
        return run.id
    except Exception:
        session.rollback()
        log.exception("Failed to store crosscheck results")
        raise
    finally:
        session.close()
        engine.dispose()
