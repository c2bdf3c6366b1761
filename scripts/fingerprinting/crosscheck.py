"""Pairwise crosscheck of fingerprints.

Every unordered pair of entries in a fingerprint store is scored by the
likelihood engine and the LOD is classified against what the identities
lead us to expect: entries sharing a sample name should match, entries
from different samples should not (unless all groups are expected to
match). Unexpected outcomes are reported as data and counted; they never
raise.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

from constants import (
    DEFAULT_GENOTYPING_ERROR_RATE,
    DEFAULT_LOD_THRESHOLD,
    DEFAULT_LOSS_OF_HET_RATE,
    DataType,
    FingerprintResult,
)
from fingerprinting.engine import LikelihoodEngine
from fingerprinting.fingerprint import MatchResults
from fingerprinting.generation import FingerprintStore
from fingerprinting.identity import IdentityKey

log = logging.getLogger(__name__)

# result -> (is_expected, is_match); None means unknown
_RESULT_FLAGS: dict[str, tuple[bool | None, bool | None]] = {
    FingerprintResult.EXPECTED_MATCH: (True, True),
    FingerprintResult.EXPECTED_MISMATCH: (True, False),
    FingerprintResult.UNEXPECTED_MATCH: (False, True),
    FingerprintResult.UNEXPECTED_MISMATCH: (False, False),
    FingerprintResult.INCONCLUSIVE: (None, None),
}


def _flags(result: str) -> tuple[bool | None, bool | None]:
    try:
        return _RESULT_FLAGS[result]
    except KeyError:
        raise ValueError(
            f"Unknown fingerprint result '{result}'. "
            f"Valid values are: {sorted(FingerprintResult.ALL)}"
        ) from None


def is_expected(result: str) -> bool | None:
    """Whether the outcome agrees with the expectation (None if inconclusive)."""
    return _flags(result)[0]


def is_match(result: str) -> bool | None:
    """Whether the outcome says the pair matched (None if inconclusive)."""
    return _flags(result)[1]


def classify(expected_to_match: bool, lod: float, threshold: float) -> str:
    """Classify a LOD score against an expectation.

    A match needs ``lod > -threshold`` and a mismatch ``lod < threshold``.
    The check opposing the expectation runs first. With a positive
    threshold both checks pass for LODs in ``(-threshold, threshold)`` and
    that first check wins. With a negative threshold neither passes for
    LODs in ``[threshold, -threshold]``, which are inconclusive; a zero
    threshold leaves only an exact 0 inconclusive.

    Args:
        expected_to_match: Whether the pair should come from one individual
        lod: Log-odds of same individual vs different individuals
        threshold: LOD threshold

    Returns:
        One of the FingerprintResult constants
    """
    if expected_to_match:
        if lod < threshold:
            return FingerprintResult.UNEXPECTED_MISMATCH
        if lod > -threshold:
            return FingerprintResult.EXPECTED_MATCH
        return FingerprintResult.INCONCLUSIVE

    if lod > -threshold:
        return FingerprintResult.UNEXPECTED_MATCH
    if lod < threshold:
        return FingerprintResult.EXPECTED_MISMATCH
    return FingerprintResult.INCONCLUSIVE


@dataclass
class CrosscheckConfig:
    """Policy applied when crosschecking a store."""

    lod_threshold: float = DEFAULT_LOD_THRESHOLD
    expect_all_groups_to_match: bool = False
    output_errors_only: bool = False
    genotyping_error_rate: float = DEFAULT_GENOTYPING_ERROR_RATE
    loss_of_het_rate: float = DEFAULT_LOSS_OF_HET_RATE


@dataclass(frozen=True)
class CrosscheckMetric:
    """One compared pair, as written to the metrics file."""

    result: str
    data_type: str
    lod_score: float
    lod_score_tumor_normal: float
    lod_score_normal_tumor: float
    left_run_barcode: str
    left_lane: int
    left_molecular_barcode_sequence: str
    left_library: str
    left_sample: str
    right_run_barcode: str
    right_lane: int
    right_molecular_barcode_sequence: str
    right_library: str
    right_sample: str

    @classmethod
    def from_pair(
        cls,
        result: str,
        data_type: str,
        scores: MatchResults,
        left: IdentityKey,
        right: IdentityKey,
    ) -> CrosscheckMetric:
        return cls(
            result=result,
            data_type=data_type,
            lod_score=scores.lod,
            lod_score_tumor_normal=scores.lod_tumor_normal,
            lod_score_normal_tumor=scores.lod_normal_tumor,
            left_run_barcode=left.run_barcode,
            left_lane=left.lane,
            left_molecular_barcode_sequence=left.molecular_barcode,
            left_library=left.library,
            left_sample=left.sample,
            right_run_barcode=right.run_barcode,
            right_lane=right.lane,
            right_molecular_barcode_sequence=right.molecular_barcode,
            right_library=right.library,
            right_sample=right.sample,
        )

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class CrosscheckResult:
    """Metrics in pair-enumeration order plus the unexpected-outcome count."""

    unexpected_count: int = 0
    metrics: list[CrosscheckMetric] = field(default_factory=list)


def crosscheck(
    store: FingerprintStore,
    engine: LikelihoodEngine,
    config: CrosscheckConfig | None = None,
    data_type: str = DataType.READGROUP,
) -> CrosscheckResult:
    """Compare every unordered pair of fingerprints in a store.

    Entries are enumerated in store order; pair (i, j) with i < j is
    compared once. A metric is recorded for every pair unless
    ``output_errors_only`` is set, in which case pairs whose outcome was
    confirmed as expected are skipped (inconclusive pairs are kept).
    Inconclusive outcomes never count as unexpected.

    Args:
        store: Fingerprints keyed by identity (aggregated or not)
        engine: Likelihood engine providing compare()
        config: Threshold and reporting policy
        data_type: Granularity tag written on every metric

    Returns:
        CrosscheckResult with metrics and unexpected count
    """
    config = config or CrosscheckConfig()
    keys = list(store)
    result = CrosscheckResult()

    log.info(
        "Crosschecking %d %s fingerprint(s) (%d pairs, LOD threshold %s)",
        len(keys),
        data_type,
        len(keys) * (len(keys) - 1) // 2,
        config.lod_threshold,
    )

    for i, left in enumerate(keys):
        for right in keys[i + 1:]:
            expected_to_match = config.expect_all_groups_to_match or left.sample == right.sample

            scores = engine.compare(
                store[left],
                store[right],
                config.genotyping_error_rate,
                config.loss_of_het_rate,
            )
            outcome = classify(expected_to_match, scores.lod, config.lod_threshold)
            expected = is_expected(outcome)

            if not config.output_errors_only or expected is not True:
                result.metrics.append(
                    CrosscheckMetric.from_pair(outcome, data_type, scores, left, right)
                )
            if expected is False:
                result.unexpected_count += 1
                log.debug("%s: %s vs %s (LOD %.3f)", outcome, left, right, scores.lod)

    log.info(
        "Crosscheck finished: %d metric(s), %d unexpected result(s)",
        len(result.metrics),
        result.unexpected_count,
    )
    return result
