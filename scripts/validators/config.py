"""Configuration validation for the crosscheck ``config.yaml`` block.

This module provides validators to ensure the crosscheck settings have
valid types and ranges, and that mutually exclusive options are not combined,
before any file is fingerprinted.
"""

from pathlib import Path

import yaml

from constants import GroupingMode

from .base import ValidationError, validate_probability

BOOLEAN_OPTIONS = {
    "crosscheck_libraries",
    "crosscheck_samples",
    "allow_duplicate_reads",
    "output_errors_only",
    "expect_all_groups_to_match",
}
KNOWN_OPTIONS = BOOLEAN_OPTIONS | {
    "input",
    "output",
    "haplotype_map",
    "engine",
    "lod_threshold",
    "num_threads",
    "timeout",
    "loss_of_het_rate",
    "genotyping_error_rate",
    "exit_code_when_mismatch",
    "database",
}


def resolve_grouping_mode(crosscheck_libraries: bool, crosscheck_samples: bool) -> str:
    """Turn the two roll-up flags into a GroupingMode.

    Raises:
        ValidationError: If both flags are set
    """
    if crosscheck_libraries and crosscheck_samples:
        raise ValidationError(
            "crosscheck_libraries and crosscheck_samples are mutually exclusive. "
            "Choose one level to roll fingerprints up to"
        )
    if crosscheck_samples:
        return GroupingMode.BY_SAMPLE
    if crosscheck_libraries:
        return GroupingMode.BY_LIBRARY
    return GroupingMode.NONE


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_crosscheck_config(config: dict) -> None:
    """Validate a crosscheck configuration block.

    Args:
        config: Mapping of option name to value (CLI names, snake_case)

    Raises:
        ValidationError: If any option is unknown, has the wrong type or
            range, or mutually exclusive options are combined
    """
    if not isinstance(config, dict):
        raise ValidationError(
            f"Config field 'crosscheck' must be a dictionary, "
            f"got: {type(config).__name__}"
        )

    # Unset options
    config = {name: value for name, value in config.items() if value is not None}

    unknown = set(config) - KNOWN_OPTIONS
    if unknown:
        raise ValidationError(
            f"Unknown crosscheck option(s): {sorted(unknown)}. "
            f"Valid options are: {sorted(KNOWN_OPTIONS)}"
        )

    for name in BOOLEAN_OPTIONS & set(config):
        if not isinstance(config[name], bool):
            raise ValidationError(
                f"Crosscheck option '{name}' must be true or false, got: {config[name]!r}"
            )

    resolve_grouping_mode(
        config.get("crosscheck_libraries", False),
        config.get("crosscheck_samples", False),
    )

    if "input" in config:
        inputs = config["input"]
        if isinstance(inputs, (str, Path)):
            inputs = [inputs]
        if not isinstance(inputs, list) or not all(isinstance(i, (str, Path)) for i in inputs):
            raise ValidationError(
                f"Crosscheck option 'input' must be a path or list of paths, got: {inputs!r}"
            )

    if "lod_threshold" in config and not _is_number(config["lod_threshold"]):
        raise ValidationError(
            f"Crosscheck option 'lod_threshold' must be a number, "
            f"got: {config['lod_threshold']!r}"
        )

    if "num_threads" in config:
        num_threads = config["num_threads"]
        if not isinstance(num_threads, int) or isinstance(num_threads, bool) or num_threads < 1:
            raise ValidationError(
                f"Crosscheck option 'num_threads' must be a positive integer, got: {num_threads!r}"
            )

    if "timeout" in config:
        timeout = config["timeout"]
        if not _is_number(timeout) or timeout < 0:
            raise ValidationError(
                f"Crosscheck option 'timeout' must be a non-negative number of seconds, "
                f"got: {timeout!r}"
            )

    for name in ("loss_of_het_rate", "genotyping_error_rate"):
        if name in config:
            validate_probability(config[name], name)

    if "exit_code_when_mismatch" in config:
        code = config["exit_code_when_mismatch"]
        if not isinstance(code, int) or isinstance(code, bool) or not 0 <= code <= 255:
            raise ValidationError(
                f"Crosscheck option 'exit_code_when_mismatch' must be an integer "
                f"between 0 and 255, got: {code!r}"
            )

    if "engine" in config and (not isinstance(config["engine"], str) or ":" not in config["engine"]):
        raise ValidationError(
            f"Crosscheck option 'engine' must look like 'package.module:factory', "
            f"got: {config['engine']!r}"
        )


def load_config(config_path: str | Path) -> dict:
    """Load the ``crosscheck`` block from a YAML configuration file.

    A file without a ``crosscheck`` key is treated as the block itself.

    Args:
        config_path: Path to config.yaml

    Returns:
        Validated crosscheck configuration dictionary

    Raises:
        ValidationError: If config cannot be loaded or is invalid
    """
    path = Path(config_path)

    if not path.exists():
        raise ValidationError(f"Configuration file not found: {path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Failed to parse configuration file {path}: {e}") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValidationError(
            f"Configuration file {path} does not contain a valid YAML dictionary"
        )

    block = config.get("crosscheck", config)
    validate_crosscheck_config(block)
    return block
