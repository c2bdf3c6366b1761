"""Identity keys describing where a fingerprint came from.

An IdentityKey names the provenance of one fingerprint: sample, library,
flowcell/run barcode, lane, molecular barcode and read group. Keys from
several read groups are reconciled with ``merge`` when fingerprints are
rolled up to the library or sample level: fields that agree survive, fields
that disagree (or are missing on either side) are cleared.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from functools import reduce
from pathlib import Path
from typing import Iterable

from constants import MISSING_LANE, MISSING_STRING, UNPARSEABLE_PLATFORM_UNIT
from utils import safe_str
from validators.base import ValidationError
from validators.input_files import read_alignment_read_groups

log = logging.getLogger(__name__)

_LANE_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class IdentityKey:
    """Provenance of a fingerprint.

    Empty strings and a lane of -1 mean "absent or cleared by a merge".
    """

    sample: str
    library: str = MISSING_STRING
    run_barcode: str = MISSING_STRING
    lane: int = MISSING_LANE
    molecular_barcode: str = MISSING_STRING
    read_group: str = MISSING_STRING

    def merge(self, other: IdentityKey) -> IdentityKey:
        """Return the key holding only the fields both keys agree on.

        The operation is commutative and associative, so folding any
        ordering of a group's keys gives the same result. Disagreeing
        sample names are cleared like every other field and are not
        reported here.
        """
        merged = {}
        for f in fields(self):
            mine = getattr(self, f.name)
            theirs = getattr(other, f.name)
            merged[f.name] = mine if mine == theirs else _missing(f.name)
        return IdentityKey(**merged)

    @classmethod
    def from_read_group(cls, read_group: dict) -> IdentityKey:
        """Build a key from a SAM header @RG record.

        Args:
            read_group: Mapping with the SAM tags ID, SM, LB and PU

        Returns:
            IdentityKey for the read group

        Raises:
            ValidationError: If the read group has no sample (SM) tag
        """
        rg_id = safe_str(read_group.get("ID"), default=MISSING_STRING)
        sample = safe_str(read_group.get("SM"))
        if not sample:
            raise ValidationError(f"Read group '{rg_id}' has no sample (SM) tag")

        run_barcode, lane, molecular_barcode = parse_platform_unit(
            safe_str(read_group.get("PU"), default=MISSING_STRING)
        )
        return cls(
            sample=sample,
            library=safe_str(read_group.get("LB"), default=MISSING_STRING),
            run_barcode=run_barcode,
            lane=lane,
            molecular_barcode=molecular_barcode,
            read_group=rg_id,
        )

    def __str__(self) -> str:
        lane = "" if self.lane == MISSING_LANE else str(self.lane)
        return (
            f"{self.sample}/{self.library}/{self.run_barcode}.{lane}."
            f"{self.molecular_barcode}/{self.read_group}"
        )


def _missing(field_name: str):
    return MISSING_LANE if field_name == "lane" else MISSING_STRING


def merge_identity_keys(keys: Iterable[IdentityKey]) -> IdentityKey:
    """Fold a non-empty collection of keys into one merged key.

    Raises:
        ValueError: If ``keys`` is empty
    """
    keys = list(keys)
    if not keys:
        raise ValueError("Cannot merge an empty collection of identity keys")
    return reduce(IdentityKey.merge, keys)


def parse_platform_unit(platform_unit: str) -> tuple[str, int, str]:
    """Split a platform unit into run barcode, lane and molecular barcode.

    Expected form is ``<run_barcode>.<lane>[.<molecular_barcode>]``, for
    example ``D047KACXX110901.1.ACCAACTG``. Older files may omit the
    molecular barcode.

    Returns:
        Tuple of (run_barcode, lane, molecular_barcode); unparseable values
        give ("?", -1, "?")

    Examples:
        >>> parse_platform_unit("D047KACXX110901.1.ACCAACTG")
        ('D047KACXX110901', 1, 'ACCAACTG')
        >>> parse_platform_unit("H3JNVADXX.2")
        ('H3JNVADXX', 2, '')
    """
    parts = platform_unit.split(".") if platform_unit else []
    if len(parts) in (2, 3) and _LANE_RE.match(parts[1]):
        molecular_barcode = parts[2] if len(parts) == 3 else MISSING_STRING
        return parts[0], int(parts[1]), molecular_barcode

    log.warning(
        "Unexpected platform unit '%s'; expected <run_barcode>.<lane>[.<barcode>]",
        platform_unit,
    )
    return UNPARSEABLE_PLATFORM_UNIT, MISSING_LANE, UNPARSEABLE_PLATFORM_UNIT


def read_group_identity_keys(alignment_path: str | Path) -> list[IdentityKey]:
    """Read one identity key per @RG line of a SAM/BAM/CRAM header.

    Args:
        alignment_path: Path to the alignment file

    Returns:
        Keys in header order

    Raises:
        ValidationError: If the file cannot be opened or has no read groups
    """
    return [IdentityKey.from_read_group(rg) for rg in read_alignment_read_groups(alignment_path)]
