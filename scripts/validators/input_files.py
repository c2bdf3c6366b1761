"""Validation for input and output files (SAM/BAM/CRAM, haplotype map, metrics).

This module provides validators for the files a crosscheck run touches, to
ensure they exist, can be opened and carry the read group metadata the
fingerprinting relies on.
"""

import os
from pathlib import Path

import pysam

from .base import ValidationError, validate_file_exists


def read_alignment_read_groups(alignment_path: str | Path) -> list[dict]:
    """Read the @RG records from the header of a SAM, BAM or CRAM file.

    Raises:
        ValidationError: If the file cannot be opened or has no @RG lines
    """
    path = Path(alignment_path)
    try:
        with pysam.AlignmentFile(str(path), "r", check_sq=False) as aln:
            header = aln.header.to_dict()
    except (OSError, ValueError) as e:
        raise ValidationError(
            f"Alignment file {path.name} cannot be opened or has invalid header: {e}"
        ) from e

    read_groups = header.get("RG", [])
    if not read_groups:
        raise ValidationError(
            f"Alignment file {path.name} has no @RG header lines. "
            f"Fingerprints are generated per read group"
        )
    return read_groups


def validate_alignment_file(alignment_path: str | Path) -> list[dict]:
    """Validate an alignment file can be opened and has sample-tagged read groups.

    Args:
        alignment_path: Path to SAM, BAM or CRAM file

    Returns:
        The header @RG records

    Raises:
        ValidationError: If the file is missing, unreadable, or lacks
            read groups with an SM tag

    Example:
        >>> read_groups = validate_alignment_file("NA12878.bam")
    """
    path = validate_file_exists(alignment_path, "Alignment file")
    if not os.access(path, os.R_OK):
        raise ValidationError(f"Alignment file is not readable: {path}")

    read_groups = read_alignment_read_groups(path)

    missing_sample = [rg.get("ID", "?") for rg in read_groups if not rg.get("SM")]
    if missing_sample:
        raise ValidationError(
            f"Alignment file {path.name} has read group(s) without a sample (SM) tag: "
            f"{missing_sample}"
        )

    return read_groups


def validate_haplotype_map(haplotype_map: str | Path) -> Path:
    """Validate the haplotype map used to pick fingerprinting sites is readable.

    Raises:
        ValidationError: If the file is missing or unreadable
    """
    path = validate_file_exists(haplotype_map, "Haplotype map")
    if not os.access(path, os.R_OK):
        raise ValidationError(f"Haplotype map is not readable: {path}")
    return path


def validate_output_writable(output_path: str | Path) -> Path:
    """Validate that a metrics file can be written at the given path.

    Raises:
        ValidationError: If the path is a directory, or its parent
            directory is missing or not writable
    """
    path = Path(output_path)
    if path.exists():
        if not path.is_file():
            raise ValidationError(f"Output is not a file: {path}")
        if not os.access(path, os.W_OK):
            raise ValidationError(f"Output file is not writable: {path}")
        return path

    parent = path.parent if str(path.parent) else Path(".")
    if not parent.is_dir():
        raise ValidationError(f"Output directory does not exist: {parent}")
    if not os.access(parent, os.W_OK):
        raise ValidationError(f"Output directory is not writable: {parent}")
    return path
