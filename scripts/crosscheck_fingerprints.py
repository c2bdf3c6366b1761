"""Check that read groups, libraries or samples come from the expected individuals.

Fingerprints every read group of the input alignment files, optionally rolls
them up to the library or sample level, compares every pair and writes one
metric per pair. Exits 0 when every pair related as expected and with
``exit_code_when_mismatch`` otherwise. Fatal configuration or fingerprinting
errors exit 2 before any metric is written, and failures writing the metrics
file or database also exit 2. A timed-out run exits without waiting for
abandoned engine calls.

Can be called from the command line, as a Snakemake script, or used as a
library through ``run_crosscheck``.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from constants import (
    DATA_TYPE_FOR_GROUPING,
    DEFAULT_EXIT_CODE_WHEN_MISMATCH,
    DEFAULT_GENOTYPING_ERROR_RATE,
    DEFAULT_LOD_THRESHOLD,
    DEFAULT_LOSS_OF_HET_RATE,
    DEFAULT_NUM_THREADS,
    DEFAULT_TIMEOUT_SECONDS,
    EXIT_CODE_FATAL,
)
from fingerprinting import (
    CrosscheckConfig,
    FingerprintingError,
    LikelihoodEngine,
    aggregate,
    crosscheck,
    generate_fingerprints,
    load_engine,
    stranded_workers,
)
from reporting.metrics_file import write_metrics_file
from utils import unroll_input_files
from validators import (
    ValidationContext,
    ValidationError,
    load_config,
    resolve_grouping_mode,
    validate_alignment_file,
    validate_crosscheck_config,
    validate_haplotype_map,
    validate_output_writable,
)

log = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "input": [],
    "output": None,
    "haplotype_map": None,
    "engine": None,
    "lod_threshold": DEFAULT_LOD_THRESHOLD,
    "crosscheck_libraries": False,
    "crosscheck_samples": False,
    "num_threads": DEFAULT_NUM_THREADS,
    "timeout": DEFAULT_TIMEOUT_SECONDS,
    "allow_duplicate_reads": False,
    "output_errors_only": False,
    "loss_of_het_rate": DEFAULT_LOSS_OF_HET_RATE,
    "genotyping_error_rate": DEFAULT_GENOTYPING_ERROR_RATE,
    "expect_all_groups_to_match": False,
    "exit_code_when_mismatch": DEFAULT_EXIT_CODE_WHEN_MISMATCH,
    "database": None,
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="crosscheck-fingerprints",
        description="Checks if all read groups, libraries or samples appear to come "
        "from the expected individuals.",
    )
    ap.add_argument("-c", "--config", type=Path, help="YAML file with a 'crosscheck' block.")
    ap.add_argument(
        "-I", "--input", action="append",
        help="Alignment file, or a .list/.txt file of alignment files. Repeatable.",
    )
    ap.add_argument("-O", "--output", help="Metrics file to write (default: stdout).")
    ap.add_argument("-H", "--haplotype-map", help="Haplotype map used to pick fingerprinting sites.")
    ap.add_argument("-e", "--engine", help="Likelihood engine factory, as 'package.module:factory'.")
    ap.add_argument(
        "--lod-threshold", type=float,
        help="Pairs expected to match fail below this LOD; pairs expected to "
        "mismatch fail above its negation. LODs in between are inconclusive.",
    )
    ap.add_argument(
        "--crosscheck-libraries", action="store_true", default=None,
        help="Roll fingerprints up to the library level before comparing.",
    )
    ap.add_argument(
        "--crosscheck-samples", action="store_true", default=None,
        help="Roll fingerprints up to the sample level before comparing.",
    )
    ap.add_argument("-t", "--num-threads", type=int, help="Files fingerprinted concurrently.")
    ap.add_argument("--timeout", type=float, help="Seconds allowed for fingerprint generation.")
    ap.add_argument(
        "--allow-duplicate-reads", action="store_true", default=None,
        help="Let the engine use reads marked as duplicates.",
    )
    ap.add_argument(
        "--output-errors-only", action="store_true", default=None,
        help="Only report pairs that did not relate as expected.",
    )
    ap.add_argument("--loss-of-het-rate", type=float, help="Tumor loss-of-heterozygosity rate.")
    ap.add_argument(
        "--genotyping-error-rate", type=float,
        help="Probability that an observed genotype is wrong (default: 1e-6).",
    )
    ap.add_argument(
        "--expect-all-groups-to-match", action="store_true", default=None,
        help="Expect every pair to match irrespective of sample names.",
    )
    ap.add_argument(
        "--exit-code-when-mismatch", type=int,
        help="Exit status when unexpected results are found (default: 1).",
    )
    ap.add_argument("--database", help="SQLite database to store the results in.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return ap


def resolve_options(args: argparse.Namespace) -> dict[str, Any]:
    """Merge defaults, the config file and command line flags (in that order)."""
    options = dict(DEFAULTS)
    if args.config:
        options.update(load_config(args.config))

    for name in DEFAULTS:
        value = getattr(args, name, None)
        if value is not None:
            options[name] = value

    if isinstance(options["input"], str):
        options["input"] = [options["input"]]
    return options


def preflight(options: dict[str, Any], engine_given: bool) -> list[Path]:
    """Validate every input up front, reporting all problems at once.

    Returns:
        Unrolled list of alignment files

    Raises:
        ValidationError: Combined error if anything is wrong
    """
    ctx = ValidationContext()
    ctx.validate(validate_crosscheck_config, options)

    files: list[Path] = []
    if not options["input"]:
        ctx.errors.append(ValidationError("At least one input alignment file is required"))
    else:
        try:
            files = unroll_input_files(options["input"])
        except OSError as e:
            ctx.errors.append(ValidationError(f"Cannot read input list: {e}"))

    for path in files:
        log.info("Validating alignment file: %s", path)
        ctx.validate(validate_alignment_file, path)

    if not engine_given:
        if not options["engine"]:
            ctx.errors.append(ValidationError("A likelihood engine ('engine') is required"))
        if not options["haplotype_map"]:
            ctx.errors.append(ValidationError("A haplotype map ('haplotype_map') is required"))
    if options["haplotype_map"]:
        ctx.validate(validate_haplotype_map, options["haplotype_map"])

    if options["output"]:
        ctx.validate(validate_output_writable, options["output"])

    ctx.raise_if_errors()
    return files


def run_crosscheck(options: dict[str, Any], engine: LikelihoodEngine | None = None) -> int:
    """Run the full crosscheck described by ``options``.

    Args:
        options: Resolved options (see DEFAULTS for the keys)
        engine: Engine to use instead of loading ``options['engine']``

    Returns:
        0 if every pair related as expected, else exit_code_when_mismatch

    Raises:
        ValidationError: Configuration or input problems
        FingerprintingError: Generation failed, timed out or collided
    """
    options = {**DEFAULTS, **options}
    files = preflight(options, engine_given=engine is not None)
    grouping_mode = resolve_grouping_mode(
        options["crosscheck_libraries"], options["crosscheck_samples"]
    )
    data_type = DATA_TYPE_FOR_GROUPING[grouping_mode]

    if engine is None:
        engine = load_engine(
            options["engine"],
            haplotype_map=Path(options["haplotype_map"]),
            allow_duplicate_reads=options["allow_duplicate_reads"],
        )

    log.info("Done checking input files, moving on to fingerprinting %d file(s)", len(files))
    store = generate_fingerprints(
        files, engine, num_threads=options["num_threads"], timeout=options["timeout"]
    )

    log.info("Finished generating fingerprints, moving on to crosschecking")
    config = CrosscheckConfig(
        lod_threshold=options["lod_threshold"],
        expect_all_groups_to_match=options["expect_all_groups_to_match"],
        output_errors_only=options["output_errors_only"],
        genotyping_error_rate=options["genotyping_error_rate"],
        loss_of_het_rate=options["loss_of_het_rate"],
    )
    result = crosscheck(aggregate(store, grouping_mode), engine, config, data_type)

    header = {
        "data_type": data_type,
        "lod_threshold": config.lod_threshold,
        "expect_all_groups_to_match": config.expect_all_groups_to_match,
        "output_errors_only": config.output_errors_only,
        "loss_of_het_rate": config.loss_of_het_rate,
        "inputs": ",".join(str(f) for f in files),
    }
    write_metrics_file(result.metrics, options["output"], header)

    if options["database"]:
        from ingestion.ingest_crosscheck import write_to_database

        write_to_database(
            options["database"], result, config, data_type,
            params={"engine": options["engine"], "inputs": files},
        )

    if result.unexpected_count > 0:
        log.warning(
            "At least two %s entries did not relate as expected (%d unexpected result(s))",
            data_type.lower(),
            result.unexpected_count,
        )
        return options["exit_code_when_mismatch"]

    log.info("All %s entries related as expected", data_type.lower())
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        options = resolve_options(args)
        return run_crosscheck(options)
    except ValidationError as e:
        log.error("Invalid configuration or inputs:\n%s", e)
        return EXIT_CODE_FATAL
    except FingerprintingError as e:
        log.error("Fingerprinting failed: %s", e)
        return EXIT_CODE_FATAL
    except SQLAlchemyError as e:
        log.error("Storing results in the database failed: %s", e)
        return EXIT_CODE_FATAL
    except OSError as e:
        log.error("Writing results failed: %s", e)
        return EXIT_CODE_FATAL


def exit_promptly(code: int) -> None:
    """Exit with ``code`` without waiting for stranded fingerprinting threads.

    Engine calls abandoned after a timeout keep running on non-daemon
    threads, which the interpreter would otherwise join at exit. When any
    are left, logging is flushed and the process ends immediately.
    """
    stranded = stranded_workers()
    if not stranded:
        sys.exit(code)

    log.warning("Abandoning %d unfinished fingerprinting thread(s)", len(stranded))
    logging.shutdown()
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(code)


def cli() -> None:
    """Console script entry point."""
    exit_promptly(main())


def run_crosscheck_snakemake():
    """Entry point for Snakemake script execution."""
    from typing import TYPE_CHECKING as _TC

    if _TC:
        from snakemake.script import Snakemake
        snakemake_var: Snakemake
    else:
        snakemake_var = snakemake  # type: ignore  # noqa: F821

    logging.basicConfig(
        filename=snakemake_var.log[0],
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    options = dict(snakemake_var.params.get("crosscheck", {}))
    options["input"] = [str(p) for p in snakemake_var.input.alignments]
    options["output"] = snakemake_var.output.metrics

    try:
        exit_code = run_crosscheck(options)
    except FingerprintingError as e:
        log.error("Fingerprinting failed: %s", e)
        exit_promptly(EXIT_CODE_FATAL)

    if exit_code != 0 and snakemake_var.params.get("fail_on_mismatch", True):
        raise SystemExit(exit_code)


if __name__ == "__main__":
    if "snakemake" in globals():
        run_crosscheck_snakemake()
    else:
        cli()
