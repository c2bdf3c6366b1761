"""Shared utility functions for pipeline scripts.

This module provides common helper functions used across multiple
pipeline scripts to avoid code duplication and ensure consistency.
"""

from pathlib import Path
from typing import Any


def safe_float(val: Any, default: float | None = None) -> float | None:
    """Convert value to float, returning default for invalid values.

    Args:
        val: Value to convert to float
        default: Default value to return if conversion fails

    Returns:
        Float value or default if conversion fails

    Examples:
        >>> safe_float("3.14")
        3.14
        >>> safe_float("invalid")
        None
        >>> safe_float("invalid", default=0.0)
        0.0
    """
    try:
        result = float(val)
        # NaN and infinity are not usable scores
        import math
        if math.isnan(result) or math.isinf(result):
            return default
        return result
    except (ValueError, TypeError):
        return default


def safe_str(val: Any, default: str | None = None) -> str | None:
    """Convert value to string, returning default for None/NaN values.

    Strips whitespace and returns default if whitespace-only.

    Examples:
        >>> safe_str("  NA12878 ")
        'NA12878'
        >>> safe_str(None, default="")
        ''
    """
    if val is None:
        return default
    try:
        import math

        if math.isnan(float(val)):
            return default
    except (ValueError, TypeError):
        pass

    str_val = str(val)
    if str_val == "":
        return ""

    result = str_val.strip()
    if not result:
        return default

    return result


LIST_SUFFIXES = (".list", ".txt")


def unroll_input_files(
    inputs: list[str | Path], list_suffixes: tuple[str, ...] = LIST_SUFFIXES
) -> list[Path]:
    """Expand file-of-filenames inputs into a flat list of paths.

    An input ending in one of ``list_suffixes`` is read line by line; each
    non-blank, non-comment line names another input (resolved relative to
    the list file) which is itself unrolled. Order is preserved.

    Args:
        inputs: Alignment files and/or lists of alignment files
        list_suffixes: Suffixes that mark a file-of-filenames

    Returns:
        Flat list of paths

    Examples:
        >>> unroll_input_files(["a.bam", "b.bam"])
        [PosixPath('a.bam'), PosixPath('b.bam')]
    """
    unrolled: list[Path] = []
    for item in inputs:
        path = Path(item)
        if path.suffix in list_suffixes:
            nested = []
            for line in path.read_text().splitlines():
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                entry = Path(line)
                if not entry.is_absolute():
                    entry = path.parent / entry
                nested.append(entry)
            unrolled.extend(unroll_input_files(nested, list_suffixes))
        else:
            unrolled.append(path)
    return unrolled
