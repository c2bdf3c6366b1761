"""Tests for concurrent fingerprint generation."""

from __future__ import annotations

import threading

import pytest

from fingerprinting.errors import (
    FingerprintGenerationError,
    GenerationTimeoutError,
    IdentityCollisionError,
)
from fingerprinting.fingerprint import Fingerprint
from fingerprinting.generation import generate_fingerprints, stranded_workers
from fingerprinting.identity import IdentityKey
from stub_engine import StubEngine
from validators import ValidationError


@pytest.fixture
def alignments(make_alignment, make_read_group):
    """Four files: two read groups of NA12891, then one each of NA12892-4."""
    return [
        make_alignment(
            "NA12891.sam",
            [
                make_read_group("rg1", "NA12891", platform_unit="FC1.1.AAAA"),
                make_read_group("rg2", "NA12891", platform_unit="FC1.2.AAAA"),
            ],
        ),
        make_alignment("NA12892.sam", [make_read_group("rg3", "NA12892")]),
        make_alignment("NA12893.bam", [make_read_group("rg4", "NA12893")], binary=True),
        make_alignment("NA12894.sam", [make_read_group("rg5", "NA12894")]),
    ]


class TestGenerateFingerprints:
    def test_one_entry_per_read_group(self, alignments):
        store = generate_fingerprints(alignments, StubEngine())
        assert [k.read_group for k in store] == ["rg1", "rg2", "rg3", "rg4", "rg5"]
        assert all(isinstance(fp, Fingerprint) for fp in store.values())

    def test_file_order_kept_with_threads(self, alignments):
        engine = StubEngine(delay=0.05)
        store = generate_fingerprints(list(reversed(alignments)), engine, num_threads=4)
        assert [k.read_group for k in store] == ["rg5", "rg4", "rg3", "rg1", "rg2"]

    def test_parallelism_bounded(self, alignments):
        engine = StubEngine(delay=0.05)
        generate_fingerprints(alignments, engine, num_threads=2)
        assert 1 <= engine.max_active <= 2
        assert len(engine.fingerprinted) == 4

    def test_single_thread(self, alignments):
        engine = StubEngine(delay=0.01)
        generate_fingerprints(alignments, engine, num_threads=1)
        assert engine.max_active == 1

    def test_empty_file_list(self):
        assert generate_fingerprints([], StubEngine()) == {}

    def test_accepts_string_paths(self, alignments):
        store = generate_fingerprints([str(p) for p in alignments[:1]], StubEngine())
        assert len(store) == 2


class TestGenerationFailures:
    def test_timeout_returns_nothing(self, alignments):
        release = threading.Event()
        engine = StubEngine(release=release)
        try:
            with pytest.raises(GenerationTimeoutError, match="exceeded"):
                generate_fingerprints(alignments, engine, num_threads=2, timeout=0.01)
        finally:
            release.set()
        assert engine.compare_calls == []

    def test_timeout_leaves_stranded_workers(self, alignments):
        release = threading.Event()
        engine = StubEngine(release=release)
        try:
            with pytest.raises(GenerationTimeoutError):
                generate_fingerprints(alignments, engine, num_threads=2, timeout=0.01)
            stranded = stranded_workers()
            assert stranded
            assert all(t.name.startswith("fingerprint_") for t in stranded)
        finally:
            release.set()

        for thread in stranded:
            thread.join(5)
        assert not any(t.is_alive() for t in stranded)

    def test_task_failure_aborts(self, alignments):
        engine = StubEngine(fail_on="NA12893.bam")
        with pytest.raises(FingerprintGenerationError, match="NA12893.bam") as excinfo:
            generate_fingerprints(alignments, engine, num_threads=2)
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_same_key_in_two_files(self, make_alignment, make_read_group):
        rg = make_read_group("rg1", "NA12891", platform_unit="FC1.1.AAAA")
        first = make_alignment("first.sam", [rg])
        second = make_alignment("second.sam", [rg])

        with pytest.raises(IdentityCollisionError) as excinfo:
            generate_fingerprints([first, second], StubEngine(), num_threads=2)

        assert "first.sam" in str(excinfo.value)
        assert "second.sam" in str(excinfo.value)

    def test_collision_from_engine_results(self, tmp_path):
        key = IdentityKey("NA12891", "lib1", "FC1", 1, "AAAA", "rg1")
        engine = StubEngine(
            stores={
                "a.sam": {key: Fingerprint("NA12891")},
                "b.sam": {key: Fingerprint("NA12892")},
            }
        )
        with pytest.raises(IdentityCollisionError):
            generate_fingerprints([tmp_path / "a.sam", tmp_path / "b.sam"], engine)

    def test_invalid_thread_count(self, alignments):
        with pytest.raises(ValidationError, match="num_threads"):
            generate_fingerprints(alignments, StubEngine(), num_threads=0)

    def test_negative_timeout(self, alignments):
        with pytest.raises(ValidationError, match="timeout"):
            generate_fingerprints(alignments, StubEngine(), timeout=-1)
