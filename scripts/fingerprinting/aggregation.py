"""Roll read-group fingerprints up to the library or sample level.

Entries of a fingerprint store are partitioned by a grouping function; each
group becomes one entry whose key is the merge of the members' keys and
whose fingerprint combines the members' evidence, labelled with the group.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from constants import GroupingMode
from fingerprinting.errors import IdentityCollisionError
from fingerprinting.fingerprint import Fingerprint, merge_fingerprints
from fingerprinting.generation import FingerprintStore
from fingerprinting.identity import IdentityKey, merge_identity_keys
from validators.base import ValidationError

log = logging.getLogger(__name__)

GroupingFunction = Callable[[IdentityKey, Fingerprint], str]


def group_label_by_sample(key: IdentityKey, fingerprint: Fingerprint) -> str:
    return key.sample


def group_label_by_library(key: IdentityKey, fingerprint: Fingerprint) -> str:
    # Sample is part of the label so identical library names from
    # different samples stay apart
    return f"{key.sample}::{key.library}"


GROUPING_FUNCTIONS: dict[str, GroupingFunction] = {
    GroupingMode.BY_SAMPLE: group_label_by_sample,
    GroupingMode.BY_LIBRARY: group_label_by_library,
}


def aggregate_by(store: FingerprintStore, by: GroupingFunction) -> FingerprintStore:
    """Merge all entries sharing a group label into one entry per label.

    Groups appear in the order their first member appears in ``store``.
    Single-member groups go through the same merge as larger ones. The
    input store and its fingerprints are left untouched.

    Args:
        store: Fingerprints keyed by identity
        by: Function mapping an entry to its group label

    Returns:
        New store with one merged entry per group
    """
    groups: dict[str, list[tuple[IdentityKey, Fingerprint]]] = {}
    for key, fingerprint in store.items():
        groups.setdefault(by(key, fingerprint), []).append((key, fingerprint))

    aggregated: FingerprintStore = {}
    for label, members in groups.items():
        merged_key = merge_identity_keys(key for key, _ in members)
        if merged_key in aggregated:
            raise IdentityCollisionError(
                f"Groups '{aggregated[merged_key].info}' and '{label}' "
                f"merge to the same identity {merged_key}"
            )
        aggregated[merged_key] = merge_fingerprints((fp for _, fp in members), info=label)

    log.info("Aggregated %d fingerprint(s) into %d group(s)", len(store), len(aggregated))
    return aggregated


def aggregate(store: FingerprintStore, grouping_mode: str = GroupingMode.NONE) -> FingerprintStore:
    """Aggregate a store at the requested granularity.

    Args:
        store: Read-group level fingerprints
        grouping_mode: One of GroupingMode.NONE, BY_LIBRARY, BY_SAMPLE

    Returns:
        New store; for NONE a shallow copy of ``store``

    Raises:
        ValidationError: If grouping_mode is unknown
    """
    if grouping_mode == GroupingMode.NONE:
        return dict(store)

    by = GROUPING_FUNCTIONS.get(grouping_mode)
    if by is None:
        raise ValidationError(
            f"Invalid grouping mode '{grouping_mode}'. "
            f"Valid options are: {sorted(GroupingMode.ALL)}"
        )
    return aggregate_by(store, by)
