"""Interface to the genotype-likelihood engine.

The engine turns an alignment file into fingerprints and scores pairs of
fingerprints. Implementations live outside this package and are loaded at
runtime from a ``module:factory`` import path.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from fingerprinting.fingerprint import Fingerprint, MatchResults
from fingerprinting.identity import IdentityKey
from validators.base import ValidationError

log = logging.getLogger(__name__)


@runtime_checkable
class LikelihoodEngine(Protocol):
    """What the crosscheck needs from a likelihood engine."""

    def fingerprint(self, path: Path) -> dict[IdentityKey, Fingerprint]:
        """Fingerprint every read group of one alignment file."""
        ...

    def compare(
        self,
        a: Fingerprint,
        b: Fingerprint,
        genotyping_error_rate: float,
        loss_of_het_rate: float,
    ) -> MatchResults:
        """Score the hypothesis that ``a`` and ``b`` share an individual."""
        ...


def load_engine(spec: str, **kwargs: Any) -> LikelihoodEngine:
    """Import and instantiate an engine from ``package.module:factory``.

    Args:
        spec: Import path of a callable returning an engine
        **kwargs: Passed through to the factory (e.g. haplotype_map)

    Returns:
        Engine instance

    Raises:
        ValidationError: If the spec is malformed, cannot be imported, or
            the factory does not produce a LikelihoodEngine
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValidationError(
            f"Invalid engine '{spec}'. Expected the form 'package.module:factory'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValidationError(f"Engine module '{module_name}' cannot be imported: {e}") from e

    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise ValidationError(f"Engine module '{module_name}' has no callable '{attr}'")

    engine = factory(**kwargs)
    if not isinstance(engine, LikelihoodEngine):
        raise ValidationError(
            f"Engine factory '{spec}' returned {type(engine).__name__}, "
            f"which lacks fingerprint() and compare()"
        )

    log.info("Loaded likelihood engine %s", spec)
    return engine
