"""Shared test fixtures for pipeline script tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pysam
import pytest

# Add scripts directory, project root (models) and this directory (stub engine)
# to path so all tests can import from them
TESTS_DIR = Path(__file__).resolve().parent
for _path in (TESTS_DIR.parent / "scripts", TESTS_DIR.parent, TESTS_DIR):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))


def write_alignment(path: Path, read_groups: list[dict], binary: bool = False) -> Path:
    """Write a header-only SAM/BAM file with the given @RG records.

    Args:
        path: Output path
        read_groups: Dicts with SAM RG tags (ID, SM, LB, PU)
        binary: Write BAM instead of SAM

    Returns:
        Path to the written file
    """
    header = {
        "HD": {"VN": "1.6", "SO": "unsorted"},
        "SQ": [{"SN": "chr1", "LN": 10000}],
    }
    if read_groups:
        header["RG"] = read_groups
    with pysam.AlignmentFile(str(path), "wb" if binary else "w", header=header):
        pass
    return path


@pytest.fixture
def make_alignment(tmp_path):
    """Fixture to create header-only alignment files for testing."""

    def _create(filename: str, read_groups: list[dict], binary: bool = False) -> Path:
        return write_alignment(tmp_path / filename, read_groups, binary=binary)

    return _create


def read_group(rg_id: str, sample: str, library: str = "lib1", platform_unit: str | None = None) -> dict:
    """Build a SAM @RG record."""
    rg = {"ID": rg_id, "SM": sample, "LB": library}
    rg["PU"] = platform_unit or f"H3JNVADXX.{len(rg_id) % 8 + 1}.ACGTACGT"
    return rg


@pytest.fixture
def make_read_group():
    return read_group
