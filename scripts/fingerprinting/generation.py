"""Concurrent fingerprint generation across alignment files.

Each input file is fingerprinted by the likelihood engine in its own task on
a bounded thread pool. Tasks share nothing; their per-file results are merged
into a single store on the calling thread once every task has finished.
The whole phase runs under one deadline: if it expires, outstanding work is
cancelled and no partial store is returned.
"""

from __future__ import annotations

import concurrent.futures as futures
import logging
import threading
import time
from pathlib import Path

from fingerprinting.engine import LikelihoodEngine
from fingerprinting.errors import (
    FingerprintGenerationError,
    GenerationTimeoutError,
    IdentityCollisionError,
)
from fingerprinting.fingerprint import Fingerprint
from fingerprinting.identity import IdentityKey
from validators.base import ValidationError

log = logging.getLogger(__name__)

FingerprintStore = dict[IdentityKey, Fingerprint]

WORKER_THREAD_PREFIX = "fingerprint"


def generate_fingerprints(
    files: list[str | Path],
    engine: LikelihoodEngine,
    num_threads: int = 1,
    timeout: float | None = None,
) -> FingerprintStore:
    """Fingerprint all files concurrently and collect one store.

    Args:
        files: Alignment files to fingerprint
        engine: Likelihood engine used for each file
        num_threads: Maximum number of files processed at once
        timeout: Seconds allowed for the whole phase (None = no limit)

    Returns:
        Store mapping each read group's IdentityKey to its Fingerprint, in
        input-file order

    Raises:
        ValidationError: If num_threads or timeout are invalid
        GenerationTimeoutError: If the deadline expires
        FingerprintGenerationError: If any file fails to fingerprint
        IdentityCollisionError: If two results share an IdentityKey
    """
    if num_threads < 1:
        raise ValidationError(f"num_threads must be at least 1, got: {num_threads}")
    if timeout is not None and timeout < 0:
        raise ValidationError(f"timeout must be non-negative, got: {timeout}")

    paths = [Path(f) for f in files]
    if not paths:
        log.warning("No input files to fingerprint")
        return {}

    log.info(
        "Fingerprinting %d file(s) with %d thread(s), timeout=%s",
        len(paths),
        num_threads,
        "none" if timeout is None else f"{timeout}s",
    )
    started = time.monotonic()

    executor = futures.ThreadPoolExecutor(
        max_workers=min(num_threads, len(paths)),
        thread_name_prefix=WORKER_THREAD_PREFIX,
    )
    try:
        pending = [executor.submit(engine.fingerprint, path) for path in paths]
        done, not_done = futures.wait(
            pending, timeout=timeout, return_when=futures.FIRST_EXCEPTION
        )

        for path, future in zip(paths, pending):
            if future in done and future.exception() is not None:
                _cancel(not_done)
                cause = future.exception()
                raise FingerprintGenerationError(
                    f"Fingerprinting {path} failed: {cause}"
                ) from cause

        if not_done:
            _cancel(not_done)
            raise GenerationTimeoutError(
                f"Fingerprint generation exceeded {timeout}s with "
                f"{len(not_done)} of {len(paths)} file(s) unfinished"
            )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    store = _collect(paths, [future.result() for future in pending])

    log.info(
        "Generated %d fingerprint(s) from %d file(s) in %.1fs",
        len(store),
        len(paths),
        time.monotonic() - started,
    )
    return store


def _cancel(not_done: set[futures.Future]) -> None:
    for future in not_done:
        future.cancel()


def _collect(paths: list[Path], results: list[FingerprintStore]) -> FingerprintStore:
    """Merge per-file results into one store, rejecting duplicate keys."""
    store: FingerprintStore = {}
    origin: dict[IdentityKey, Path] = {}

    for path, per_file in zip(paths, results):
        log.debug("%s yielded %d fingerprint(s)", path, len(per_file))
        for key, fingerprint in per_file.items():
            if key in store:
                raise IdentityCollisionError(
                    f"Identity {key} was produced by both {origin[key]} and {path}. "
                    f"Check the read group metadata of the inputs"
                )
            store[key] = fingerprint
            origin[key] = path

    return store


def stranded_workers() -> list[threading.Thread]:
    """Worker threads still running engine calls abandoned after a timeout or failure.

    The pool is shut down without waiting, so a hung ``engine.fingerprint``
    keeps its thread alive. Such threads are not daemons; callers that need
    the process to end promptly must exit without joining them.
    """
    return [
        t
        for t in threading.enumerate()
        if t.is_alive() and t.name.startswith(WORKER_THREAD_PREFIX + "_")
    ]
