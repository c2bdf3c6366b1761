"""Base validation utilities for pipeline scripts.

This module provides core validation functions to ensure inputs are usable
before any fingerprinting starts, so failures surface with clear messages
instead of part-way through a long run.
"""

from pathlib import Path
from typing import Any

import pandas as pd


class ValidationError(Exception):
    """Custom exception for configuration and input validation failures."""

    pass


class ValidationContext:
    """Context for collecting validation errors without failing fast."""

    def __init__(self):
        self.errors: list[ValidationError] = []

    def validate(self, func, *args, **kwargs) -> Any:
        """Run validation function, collecting errors instead of raising.

        Returns:
            Result of validation function, or None if error occurred
        """
        try:
            return func(*args, **kwargs)
        except ValidationError as e:
            self.errors.append(e)
            return None

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def raise_if_errors(self):
        """Raise combined error if any validations failed."""
        if self.errors:
            error_list = "\n".join(f"  {i+1}. {e}" for i, e in enumerate(self.errors))
            raise ValidationError(
                f"Validation failed with {len(self.errors)} error(s):\n{error_list}"
            )


def validate_file_exists(file_path: str | Path, file_description: str) -> Path:
    """Validate that a file exists and is readable.

    Args:
        file_path: Path to file
        file_description: Description of file for error messages

    Returns:
        Path object

    Raises:
        ValidationError: If file doesn't exist or isn't a regular file
    """
    path = Path(file_path)
    if not path.exists():
        raise ValidationError(f"{file_description} not found: {path}")
    if not path.is_file():
        raise ValidationError(f"{file_description} is not a file: {path}")
    return path


def validate_required_columns(
    df: pd.DataFrame, required: list[str], file_name: str
) -> None:
    """Validate that DataFrame has all required columns.

    Raises:
        ValidationError: If required columns are missing
    """
    missing = set(required) - set(df.columns)
    if missing:
        raise ValidationError(
            f"{file_name} missing required columns: {sorted(missing)}"
        )


def validate_enum_values(
    df: pd.DataFrame, column: str, valid_values: set[str], file_name: str
) -> None:
    """Validate that a column contains only valid enum values.

    Args:
        df: DataFrame to validate
        column: Column name to check
        valid_values: Set of valid values
        file_name: Name of file being validated

    Raises:
        ValidationError: If invalid values are found
    """
    if column not in df.columns:
        return  # Column validation should be done separately

    actual_values = set(df[column].dropna().unique())
    invalid = actual_values - valid_values

    if invalid:
        raise ValidationError(
            f"{file_name} column '{column}' contains invalid values: {sorted(invalid)}. "
            f"Valid values are: {sorted(valid_values)}"
        )


def validate_probability(value: Any, name: str) -> float:
    """Validate that a value is a number in [0, 1].

    Returns:
        The value as a float

    Raises:
        ValidationError: If value is not numeric or out of range
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"'{name}' must be a number between 0 and 1, got: {value!r}")
    if value < 0 or value > 1:
        raise ValidationError(f"'{name}' must be a number between 0 and 1, got: {value}")
    return float(value)
