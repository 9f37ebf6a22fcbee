# msfs_checksum/cli.py
from __future__ import annotations
import argparse

from . import pipeline
from .console import log
from .errors import ConfigError, OutputError, ResolutionError
from .hasher import DEFAULT_CHUNK_SIZE
from .system import describe_host

EXIT_OK = 0
EXIT_ANOMALIES = 1
EXIT_CONFIG = 2       # argparse uses 2 for usage errors as well
EXIT_NO_INSTALL = 3
EXIT_NOTHING = 4
EXIT_WRITE = 5

_MIB = 1024 * 1024
_PREVIEW = 10


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="msfs-checksum",
        description="xxHash3-128 checksum manifest of MSFS 2020 package files, "
                    "for comparing two installs file by file.",
    )
    p.add_argument("-o", "--output", required=True,
                   help="Manifest file to write (overwritten if it already exists)")
    p.add_argument("-P", "--packages", action="append", default=[], metavar="DIR",
                   help="Scan this folder instead of the detected install (repeatable; ignores --config)")
    p.add_argument("-c", "--config", metavar="USERCFG",
                   help="Use this UserCfg.opt to find InstalledPackagesPath")
    p.add_argument("-T", "--threads", type=int, default=0,
                   help="Worker threads (0 = number of logical CPUs)")
    p.add_argument("--chunk-mib", type=int, default=DEFAULT_CHUNK_SIZE // _MIB,
                   help="Read buffer per worker, in MiB")
    p.add_argument("--relative", action="store_true",
                   help="Write paths relative to their package root")
    p.add_argument("--report", metavar="PATH",
                   help="Anomaly report file (default: <output>.anomalies.txt)")
    p.add_argument("--summary", metavar="PATH", help="Also write the run summary as JSON")
    p.add_argument("--no-progress", action="store_true", help="Hide progress bars")
    return p


def run_cli(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log(f"Host: {describe_host()}")

    try:
        summary = pipeline.run(
            args.output,
            overrides=args.packages,
            config_file=args.config,
            threads=args.threads,
            chunk_size=args.chunk_mib * _MIB,
            relative=args.relative,
            report=args.report,
            use_tqdm=not args.no_progress,
        )
    except ConfigError as e:
        log(f"Configuration error: {e}")
        return EXIT_CONFIG
    except ResolutionError as e:
        log(f"Failed to start: {e}")
        return EXIT_NO_INSTALL
    except OutputError as e:
        log(f"Write failed: {e}")
        if e.summary is not None:
            for line in e.summary.describe():
                log(line)
        return EXIT_WRITE

    if summary.problems:
        log(f"Anomalies ({len(summary.problems)}), full list in {summary.report}:")
        for prob in summary.problems[:_PREVIEW]:
            log(f"  - {prob.kind}: {prob.path}")
        if len(summary.problems) > _PREVIEW:
            log(f"  ... {len(summary.problems) - _PREVIEW} more")
    for line in summary.describe():
        log(line)

    if args.summary:
        try:
            summary.write_json(args.summary)
        except OSError as e:
            log(f"Write failed: cannot write summary {args.summary}: {e}")
            return EXIT_WRITE

    if summary.outcome is pipeline.Outcome.NOTHING:
        return EXIT_NOTHING
    log(f"Manifest written → {summary.output}")
    if summary.outcome is pipeline.Outcome.ANOMALIES:
        return EXIT_ANOMALIES
    return EXIT_OK
