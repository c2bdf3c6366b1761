"""Tests for LOD classification and result flags."""

from __future__ import annotations

import pytest

from constants import FingerprintResult
from fingerprinting.crosscheck import classify, is_expected, is_match


class TestClassifyNegativeThreshold:
    """A threshold of -2 leaves LODs in [-2, 2] undecided."""

    def test_expected_match(self):
        assert classify(True, 3.0, -2.0) == FingerprintResult.EXPECTED_MATCH

    def test_unexpected_mismatch(self):
        assert classify(True, -3.0, -2.0) == FingerprintResult.UNEXPECTED_MISMATCH

    def test_expected_mismatch(self):
        assert classify(False, -3.0, -2.0) == FingerprintResult.EXPECTED_MISMATCH

    def test_unexpected_match(self):
        assert classify(False, 3.0, -2.0) == FingerprintResult.UNEXPECTED_MATCH

    @pytest.mark.parametrize("lod", [-2.0, -1.0, 0.0, 1.0, 2.0])
    def test_inside_band_is_inconclusive(self, lod):
        assert classify(True, lod, -2.0) == FingerprintResult.INCONCLUSIVE
        assert classify(False, lod, -2.0) == FingerprintResult.INCONCLUSIVE


class TestClassifyPositiveThreshold:
    """With a positive threshold both tests pass inside the band; order decides."""

    def test_mismatch_checked_first_when_expecting_match(self):
        assert classify(True, 1.0, 2.0) == FingerprintResult.UNEXPECTED_MISMATCH
        assert classify(True, 0.0, 2.0) == FingerprintResult.UNEXPECTED_MISMATCH

    def test_match_checked_first_when_expecting_mismatch(self):
        assert classify(False, 1.0, 2.0) == FingerprintResult.UNEXPECTED_MATCH
        assert classify(False, -1.0, 2.0) == FingerprintResult.UNEXPECTED_MATCH

    def test_outside_band(self):
        assert classify(True, 5.0, 2.0) == FingerprintResult.EXPECTED_MATCH
        assert classify(False, -5.0, 2.0) == FingerprintResult.EXPECTED_MISMATCH

    @pytest.mark.parametrize("lod", [-5.0, -2.0, 0.0, 1.9, 2.0, 5.0])
    def test_never_inconclusive(self, lod):
        assert classify(True, lod, 2.0) != FingerprintResult.INCONCLUSIVE
        assert classify(False, lod, 2.0) != FingerprintResult.INCONCLUSIVE


class TestZeroThreshold:
    @pytest.mark.parametrize("lod", [-3.0, -0.001, 0.001, 3.0])
    def test_never_inconclusive_off_zero(self, lod):
        for expected in (True, False):
            assert classify(expected, lod, 0.0) != FingerprintResult.INCONCLUSIVE

    def test_zero_lod_is_inconclusive(self):
        assert classify(True, 0.0, 0.0) == FingerprintResult.INCONCLUSIVE
        assert classify(False, 0.0, 0.0) == FingerprintResult.INCONCLUSIVE

    def test_sign_decides(self):
        assert classify(True, 0.5, 0.0) == FingerprintResult.EXPECTED_MATCH
        assert classify(True, -0.5, 0.0) == FingerprintResult.UNEXPECTED_MISMATCH
        assert classify(False, 0.5, 0.0) == FingerprintResult.UNEXPECTED_MATCH
        assert classify(False, -0.5, 0.0) == FingerprintResult.EXPECTED_MISMATCH


class TestSymmetry:
    @pytest.mark.parametrize("threshold", [-2.0, 0.0, 2.0])
    @pytest.mark.parametrize("lod", [-10.0, -2.5, 2.5, 10.0])
    def test_expectation_does_not_change_match_call(self, threshold, lod):
        # Outside the band the LOD alone decides match vs mismatch
        assert is_match(classify(True, lod, threshold)) == is_match(classify(False, lod, threshold))

    @pytest.mark.parametrize("threshold", [-2.0, 0.0])
    @pytest.mark.parametrize("lod", [2.5, 10.0])
    def test_opposite_lods_opposite_calls(self, threshold, lod):
        assert is_match(classify(True, lod, threshold)) is True
        assert is_match(classify(False, -lod, threshold)) is False


class TestResultFlags:
    @pytest.mark.parametrize(
        "result,expected,match",
        [
            (FingerprintResult.EXPECTED_MATCH, True, True),
            (FingerprintResult.EXPECTED_MISMATCH, True, False),
            (FingerprintResult.UNEXPECTED_MATCH, False, True),
            (FingerprintResult.UNEXPECTED_MISMATCH, False, False),
            (FingerprintResult.INCONCLUSIVE, None, None),
        ],
    )
    def test_flags(self, result, expected, match):
        assert is_expected(result) is expected
        assert is_match(result) is match

    def test_unknown_result(self):
        with pytest.raises(ValueError, match="Unknown fingerprint result"):
            is_expected("MAYBE")

    def test_constants_partition(self):
        assert FingerprintResult.EXPECTED | FingerprintResult.UNEXPECTED | {
            FingerprintResult.INCONCLUSIVE
        } == FingerprintResult.ALL
