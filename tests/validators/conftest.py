"""Shared test fixtures for validator tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
import yaml

# Add scripts directory to path
SCRIPTS_DIR = str(Path(__file__).resolve().parent.parent.parent / "scripts")
if SCRIPTS_DIR not in sys.path:
    sys.path.insert(0, SCRIPTS_DIR)


@pytest.fixture
def sample_config(tmp_path) -> Callable:
    """Factory fixture for creating crosscheck configuration dictionaries.

    Returns a function that creates a config dict with sensible defaults.

    Example:
        >>> config = sample_config(crosscheck_samples=True, lod_threshold=-5.0)
    """
    def _create_config(**overrides) -> dict:
        config = {
            "input": [str(tmp_path / "NA12891.bam"), str(tmp_path / "NA12892.bam")],
            "output": str(tmp_path / "crosscheck_metrics.txt"),
            "haplotype_map": str(tmp_path / "hg38_haplotype_map.txt"),
            "engine": "stub_engine:create_engine",
            "lod_threshold": 0.0,
            "num_threads": 2,
            "timeout": 3600,
            "loss_of_het_rate": 0.5,
            "genotyping_error_rate": 1e-6,
            "exit_code_when_mismatch": 1,
        }

        # Apply overrides
        config.update(overrides)
        return config

    return _create_config


@pytest.fixture
def write_config(tmp_path) -> Callable:
    """Factory fixture writing a dict as config.yaml and returning its path."""
    def _write(data, name: str = "config.yaml") -> Path:
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.safe_dump(data, f)
        return path

    return _write
