"""Fingerprint generation, aggregation and crosschecking.

Modules:
    identity: IdentityKey and its merge algebra
    fingerprint: Fingerprint values, evidence merging, MatchResults
    engine: Likelihood engine protocol and runtime loading
    generation: Concurrent fingerprinting of many alignment files
    aggregation: Roll-up to library or sample level
    crosscheck: Outcome classification and the pairwise driver
    errors: Fatal fingerprinting failures
"""

from .aggregation import aggregate, aggregate_by
from .crosscheck import (
    CrosscheckConfig,
    CrosscheckMetric,
    CrosscheckResult,
    classify,
    crosscheck,
    is_expected,
    is_match,
)
from .engine import LikelihoodEngine, load_engine
from .errors import (
    FingerprintGenerationError,
    FingerprintingError,
    GenerationTimeoutError,
    IdentityCollisionError,
)
from .fingerprint import Fingerprint, MatchResults, merge_fingerprints
from .generation import FingerprintStore, generate_fingerprints, stranded_workers
from .identity import IdentityKey, merge_identity_keys, read_group_identity_keys

__all__ = [
    "CrosscheckConfig",
    "CrosscheckMetric",
    "CrosscheckResult",
    "Fingerprint",
    "FingerprintGenerationError",
    "FingerprintStore",
    "FingerprintingError",
    "GenerationTimeoutError",
    "IdentityCollisionError",
    "IdentityKey",
    "LikelihoodEngine",
    "MatchResults",
    "aggregate",
    "aggregate_by",
    "classify",
    "crosscheck",
    "generate_fingerprints",
    "is_expected",
    "is_match",
    "load_engine",
    "merge_fingerprints",
    "merge_identity_keys",
    "read_group_identity_keys",
    "stranded_workers",
]
