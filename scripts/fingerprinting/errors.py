"""Exceptions raised while generating and crosschecking fingerprints.

Configuration and input problems are reported with
``validators.ValidationError``; the classes here cover failures of the
fingerprinting run itself. Unexpected matches or mismatches are results,
not errors, and never raise.
"""


class FingerprintingError(Exception):
    """Base class for fatal fingerprinting failures."""

    pass


class GenerationTimeoutError(FingerprintingError):
    """Fingerprint generation did not finish within the time budget."""

    pass


class FingerprintGenerationError(FingerprintingError):
    """A per-file fingerprinting task failed."""

    pass


class IdentityCollisionError(FingerprintingError):
    """Two fingerprinting tasks produced the same identity key."""

    pass
