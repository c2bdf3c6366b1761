"""Fingerprint values and pairwise comparison results.

A Fingerprint holds, for each fingerprinting site, a vector of genotype
log10-likelihoods. The vectors are produced by the likelihood engine and are
opaque here; the only operation this module performs on them is
accumulation when several fingerprints describing the same individual are
merged.
"""

from __future__ import annotations

import logging
from typing import Iterable, NamedTuple

import numpy as np

log = logging.getLogger(__name__)


class MatchResults(NamedTuple):
    """LOD scores returned by the engine for one pair of fingerprints."""

    lod: float
    lod_tumor_normal: float
    lod_normal_tumor: float


class Fingerprint:
    """Per-site genotype likelihood evidence for one sample.

    Args:
        sample: Owning sample name (must be non-empty)
        info: Free-form label; set to the group label when aggregated
        sites: Mapping of site identifier to genotype log-likelihood vector
    """

    def __init__(
        self,
        sample: str,
        info: str | None = None,
        sites: dict[str, np.ndarray] | None = None,
    ):
        if not sample:
            raise ValueError("Fingerprint requires a non-empty sample name")
        self.sample = sample
        self.info = info
        self.sites: dict[str, np.ndarray] = {
            site: np.asarray(values, dtype=float) for site, values in (sites or {}).items()
        }

    def merge(self, other: Fingerprint) -> Fingerprint:
        """Accumulate another fingerprint's evidence into this one.

        Site vectors are summed; sites only present in ``other`` are copied.
        Mutates and returns ``self``.
        """
        for site, values in other.sites.items():
            if site in self.sites:
                self.sites[site] = self.sites[site] + values
            else:
                self.sites[site] = values.copy()
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fingerprint):
            return NotImplemented
        if (self.sample, self.info) != (other.sample, other.info):
            return False
        if self.sites.keys() != other.sites.keys():
            return False
        return all(np.array_equal(v, other.sites[k]) for k, v in self.sites.items())

    # Mutable container with array payloads
    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self.sites)

    def __repr__(self) -> str:
        return f"<Fingerprint(sample={self.sample}, info={self.info}, sites={len(self.sites)})>"


def _distinct(fingerprints: Iterable[Fingerprint]) -> list[Fingerprint]:
    """Drop value-equal duplicates, keeping first-seen order."""
    distinct: list[Fingerprint] = []
    for fp in fingerprints:
        if not any(fp is seen or fp == seen for seen in distinct):
            distinct.append(fp)
    return distinct


def merge_fingerprints(fingerprints: Iterable[Fingerprint], info: str | None = None) -> Fingerprint:
    """Combine the evidence of fingerprints that describe one group.

    Equal fingerprints are counted once. The result takes the sample name
    of the first fingerprint and the given ``info`` label. Inputs are not
    modified.

    Args:
        fingerprints: Non-empty collection of fingerprints
        info: Label for the merged fingerprint (usually the group label)

    Returns:
        New merged Fingerprint

    Raises:
        ValueError: If ``fingerprints`` is empty
    """
    members = _distinct(fingerprints)
    if not members:
        raise ValueError("Cannot merge an empty collection of fingerprints")

    merged = Fingerprint(members[0].sample, info=info)
    for fp in members:
        merged.merge(fp)

    log.debug("Merged %d distinct fingerprint(s) into %s", len(members), info)
    return merged
