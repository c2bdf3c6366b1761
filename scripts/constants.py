"""Constants and enumerations for the crosscheck pipeline.

Centralizes magic strings into named constants for type safety and IDE support.
"""


class DataType:
    """Granularity at which fingerprints were compared."""

    READGROUP = "READGROUP"
    LIBRARY = "LIBRARY"
    SAMPLE = "SAMPLE"

    ALL = {READGROUP, LIBRARY, SAMPLE}


class GroupingMode:
    """Aggregation applied to fingerprints before crosschecking."""

    NONE = "none"
    BY_LIBRARY = "by_library"
    BY_SAMPLE = "by_sample"

    ALL = {NONE, BY_LIBRARY, BY_SAMPLE}


# Grouping mode -> data type reported on each metric
DATA_TYPE_FOR_GROUPING = {
    GroupingMode.NONE: DataType.READGROUP,
    GroupingMode.BY_LIBRARY: DataType.LIBRARY,
    GroupingMode.BY_SAMPLE: DataType.SAMPLE,
}


class FingerprintResult:
    """Outcome of comparing two fingerprints against the expectation."""

    EXPECTED_MATCH = "EXPECTED_MATCH"
    EXPECTED_MISMATCH = "EXPECTED_MISMATCH"
    UNEXPECTED_MATCH = "UNEXPECTED_MATCH"
    UNEXPECTED_MISMATCH = "UNEXPECTED_MISMATCH"
    INCONCLUSIVE = "INCONCLUSIVE"

    EXPECTED = {EXPECTED_MATCH, EXPECTED_MISMATCH}
    UNEXPECTED = {UNEXPECTED_MATCH, UNEXPECTED_MISMATCH}
    ALL = EXPECTED | UNEXPECTED | {INCONCLUSIVE}


# Sentinels for cleared / absent identity fields
MISSING_STRING = ""
MISSING_LANE = -1
UNPARSEABLE_PLATFORM_UNIT = "?"

# Defaults mirroring the command line options
DEFAULT_LOD_THRESHOLD = 0.0
DEFAULT_GENOTYPING_ERROR_RATE = 1e-6
DEFAULT_LOSS_OF_HET_RATE = 0.5
DEFAULT_NUM_THREADS = 1
DEFAULT_TIMEOUT_SECONDS = 24 * 60 * 60
DEFAULT_EXIT_CODE_WHEN_MISMATCH = 1

# Exit status when the run aborts before any metric is written
EXIT_CODE_FATAL = 2
