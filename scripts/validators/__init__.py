"""Data validation utilities for the crosscheck pipeline.

This package provides validation functions to ensure configuration and
input files are usable before fingerprinting starts, preventing failures
part-way through a run and improving error messages.

Modules:
    base: ValidationError, collect-all-errors context, file and column checks
    input_files: Alignment file, haplotype map and output path validation
    config: Crosscheck configuration validation and loading

Example:
    >>> from validators import ValidationError, validate_alignment_file
    >>> try:
    ...     validate_alignment_file("NA12878.bam")
    ... except ValidationError as e:
    ...     print(f"Validation failed: {e}")
"""

from .base import (
    ValidationContext,
    ValidationError,
    validate_enum_values,
    validate_file_exists,
    validate_probability,
    validate_required_columns,
)

from .input_files import (
    read_alignment_read_groups,
    validate_alignment_file,
    validate_haplotype_map,
    validate_output_writable,
)

from .config import (
    load_config,
    resolve_grouping_mode,
    validate_crosscheck_config,
)

__all__ = [
    # Exception and context
    "ValidationError",
    "ValidationContext",
    # Base validators
    "validate_file_exists",
    "validate_required_columns",
    "validate_enum_values",
    "validate_probability",
    # Input file validators
    "read_alignment_read_groups",
    "validate_alignment_file",
    "validate_haplotype_map",
    "validate_output_writable",
    # Config validators
    "load_config",
    "resolve_grouping_mode",
    "validate_crosscheck_config",
]
