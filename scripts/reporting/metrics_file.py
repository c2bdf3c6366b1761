"""Crosscheck metrics file writing and reading.

The metrics file is a self-describing tab-separated table: a block of
``#`` header lines (program, options, metrics class) followed by one row per
compared pair, in pair-enumeration order.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import fields
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, Iterable

import pandas as pd

from constants import DataType, FingerprintResult
from fingerprinting.crosscheck import CrosscheckMetric
from validators.base import (
    ValidationError,
    validate_enum_values,
    validate_file_exists,
    validate_required_columns,
)

log = logging.getLogger(__name__)

METRICS_CLASS = "CrosscheckMetric"
METRICS_COLUMNS = [f.name for f in fields(CrosscheckMetric)]


def metrics_to_dataframe(metrics: Iterable[CrosscheckMetric]) -> pd.DataFrame:
    """Tabulate metrics, keeping column order even when there are none."""
    return pd.DataFrame([m.as_dict() for m in metrics], columns=METRICS_COLUMNS)


def _header_lines(header: dict | None) -> list[str]:
    lines = [f"## crosscheck_fingerprints {datetime.now(UTC).isoformat(timespec='seconds')}"]
    for key, value in (header or {}).items():
        lines.append(f"# {key}={value}")
    lines.append(f"## METRICS CLASS\t{METRICS_CLASS}")
    return lines


def write_metrics_file(
    metrics: list[CrosscheckMetric],
    output: str | Path | IO[str] | None = None,
    header: dict | None = None,
) -> None:
    """Write metrics as a commented TSV.

    Args:
        metrics: Metrics in the order they should appear
        output: File path, open text stream, or None for standard output
        header: Options to record in the header block
    """
    df = metrics_to_dataframe(metrics)
    preamble = "\n".join(_header_lines(header)) + "\n"

    if output is None or hasattr(output, "write"):
        stream = output or sys.stdout
        stream.write(preamble)
        df.to_csv(stream, sep="\t", index=False)
        stream.flush()
        log.info("Wrote %d crosscheck metric(s) to stream", len(df))
        return

    path = Path(output)
    with open(path, "w") as f:
        f.write(preamble)
        df.to_csv(f, sep="\t", index=False)
    log.info("Wrote %d crosscheck metric(s) to %s", len(df), path)


def read_metrics_file(metrics_path: str | Path) -> pd.DataFrame:
    """Read a metrics file written by ``write_metrics_file``.

    Args:
        metrics_path: Path to the metrics file

    Returns:
        DataFrame with one row per metric

    Raises:
        ValidationError: If the file is missing or is not a crosscheck
            metrics table
    """
    path = validate_file_exists(metrics_path, "Crosscheck metrics file")

    skip = 0
    with open(path, "r") as f:
        for line in f:
            if not line.startswith("#"):
                break
            skip += 1

    try:
        df = pd.read_csv(
            path,
            sep="\t",
            skiprows=skip,
            keep_default_na=False,
            dtype={
                "left_run_barcode": str,
                "left_molecular_barcode_sequence": str,
                "left_library": str,
                "left_sample": str,
                "right_run_barcode": str,
                "right_molecular_barcode_sequence": str,
                "right_library": str,
                "right_sample": str,
            },
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ValidationError(f"Failed to read {path.name}: {e}") from e

    validate_required_columns(df, METRICS_COLUMNS, path.name)
    validate_enum_values(df, "result", FingerprintResult.ALL, path.name)
    validate_enum_values(df, "data_type", DataType.ALL, path.name)
    return df
