# msfs_checksum/pipeline.py
from __future__ import annotations
import json, time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Sequence

from tqdm import tqdm

from .console import log, tqdm_file, tqdm_disable, format_bytes
from .engine import hash_entries
from .errors import ConfigError, OutputError
from .hasher import DEFAULT_CHUNK_SIZE
from .layouts import DEFAULT_PROBES, FALLBACK_PROBES, LayoutProbe, usercfg_probe
from .manifest import Manifest, assemble
from .models import Anomaly, FileEntry, PackageRoot
from .roots import probe_layouts, resolve_roots
from .scanner import scan_roots
from .system import check_resources, optimal_threads


class Outcome(str, Enum):
    OK = "ok"
    ANOMALIES = "completed-with-anomalies"
    NOTHING = "nothing-to-hash"


@dataclass
class RunSummary:
    roots: list[PackageRoot]
    workers: int
    output: str
    report: str
    files: int = 0
    hashed: int = 0
    bytes_hashed: int = 0
    anomalies: int = 0
    failures: int = 0
    hardlinks: int = 0
    duplicates: int = 0
    elapsed: float = 0.0
    outcome: Outcome = Outcome.NOTHING
    problems: list = field(default_factory=list, repr=False)

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "roots": [{"path": str(r.path), "source": r.source} for r in self.roots],
            "workers": self.workers,
            "output": self.output,
            "report": self.report,
            "files": self.files,
            "hashed": self.hashed,
            "bytes_hashed": self.bytes_hashed,
            "anomalies": self.anomalies,
            "failures": self.failures,
            "hardlinks": self.hardlinks,
            "duplicates": self.duplicates,
            "elapsed_seconds": round(self.elapsed, 3),
        }

    def write_json(self, path: str | Path) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    def describe(self) -> list[str]:
        if self.outcome is Outcome.NOTHING:
            head = ("Nothing to hash: no regular files found under the package roots. "
                    f"No manifest written ({self.anomalies} anomalies, see {self.report}).")
        elif self.outcome is Outcome.ANOMALIES:
            head = f"Completed with {self.anomalies + self.failures} anomalies."
        else:
            head = "Completed."
        rate = self.bytes_hashed / self.elapsed if self.elapsed > 0 else 0
        return [
            head,
            f" Files       {self.files}",
            f" Hashed      {self.hashed} ({format_bytes(self.bytes_hashed)}, {format_bytes(int(rate))}/s)",
            f" Anomalies   {self.anomalies}",
            f" Failures    {self.failures}",
            f" Hard links  {self.hardlinks}",
            f" Elapsed     {self.elapsed:.1f}s on {self.workers} threads",
        ]


def default_report_path(output: str | Path) -> Path:
    output = Path(output)
    return output.with_name(output.name + ".anomalies.txt")


def _resolve(overrides: Sequence[str | Path], config_file: str | Path | None,
             probes: Iterable[LayoutProbe], fallbacks: Iterable[LayoutProbe]) -> list[PackageRoot]:
    # explicit roots win over an explicit config file
    if overrides or config_file is None:
        return resolve_roots(overrides, probes, fallbacks)
    if not Path(config_file).is_file():
        raise ConfigError(f"config file not found: {config_file}")
    roots = probe_layouts([usercfg_probe(config_file, "config")])
    if not roots:
        raise ConfigError(f"{config_file} does not point at an existing package folder")
    return roots


def enumerate_entries(roots: list[PackageRoot], use_tqdm: bool = True) -> tuple[list[FileEntry], int]:
    """Walk every root; returns (entries, repeat sightings dropped because roots overlap)."""
    entries: list[FileEntry] = []
    seen: set[str] = set()
    dupes = 0
    with tqdm(desc="Scanning", unit="file", file=tqdm_file(), disable=tqdm_disable(use_tqdm)) as bar:
        for entry in scan_roots(roots):
            if entry.path in seen:
                dupes += 1
                continue
            seen.add(entry.path)
            entries.append(entry)
            bar.update(1)
    return entries, dupes


def run(output: str | Path,
        overrides: Sequence[str | Path] = (),
        config_file: str | Path | None = None,
        probes: Iterable[LayoutProbe] = DEFAULT_PROBES,
        fallbacks: Iterable[LayoutProbe] = FALLBACK_PROBES,
        threads: int | None = 0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        relative: bool = False,
        report: str | Path | None = None,
        use_tqdm: bool = True,
        on_progress=None) -> RunSummary:
    """
    One full run: resolve roots -> enumerate -> hash in parallel -> assemble -> write.

    Raises ConfigError / ResolutionError before any work starts and
    OutputError if the manifest cannot be written (hashing already done).
    """
    start = time.monotonic()
    output = Path(output)
    report = Path(report) if report else default_report_path(output)
    if output.is_dir():
        raise ConfigError(f"output path is a directory: {output}")
    if chunk_size < 1:
        raise ConfigError(f"chunk size must be positive, got {chunk_size}")

    roots = _resolve(overrides, config_file, probes, fallbacks)
    workers = optimal_threads(threads)
    for r in roots:
        log(f"Package root: {r}")
    if output.exists():
        log(f"Warning: output file will be overwritten: {output}")

    entries, dupes = enumerate_entries(roots, use_tqdm)
    summary = RunSummary(roots=roots, workers=workers, output=str(output), report=str(report),
                         files=len(entries), duplicates=dupes)
    if dupes:
        log(f"{dupes} files reached through more than one root were counted once")

    hashable = [e for e in entries if e.hashable]
    excluded = [e for e in entries if not e.hashable]
    summary.hardlinks = sum(1 for e in hashable if Anomaly.HARDLINK in e.anomalies)

    if not hashable:
        # no regular file at all: report why, but never leave an empty manifest behind
        manifest = assemble([], excluded, relative=relative)
        summary.anomalies = len(excluded)
        summary.problems = manifest.problems
        _write(manifest, None, report, summary)
        summary.elapsed = time.monotonic() - start
        return summary

    check_resources(workers, chunk_size)
    results = hash_entries(hashable, workers, chunk_size, on_progress=on_progress, use_tqdm=use_tqdm)
    manifest = assemble(results, excluded, relative=relative)

    summary.hashed = len(manifest)
    summary.bytes_hashed = sum(l.size for l in manifest.lines)
    summary.anomalies = len(excluded)
    summary.failures = len(results) - len(manifest)
    summary.problems = manifest.problems
    summary.outcome = Outcome.ANOMALIES if manifest.problems else Outcome.OK
    summary.elapsed = time.monotonic() - start

    _write(manifest, output, report, summary)
    summary.elapsed = time.monotonic() - start
    return summary


def _write(manifest: Manifest, output: Path | None, report: Path, summary: RunSummary) -> None:
    try:
        if output is not None:
            manifest.write(output)
        manifest.write_report(report)
    except OutputError as e:
        e.summary, e.manifest = summary, manifest
        raise
