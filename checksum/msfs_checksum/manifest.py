# msfs_checksum/manifest.py
"""
Manifest assembly and output.

Manifest line:  ``<32 hex digest> <decimal size> <path>\\n``
Report line:    ``<kind> <path>\\n`` after a ``# anomalies: N`` header

Both are sorted by the path's filesystem bytes (``os.fsencode``), which does
not depend on locale or on the order the workers finished in. The path is
always the last field, so readers must split on the first two spaces only.
"""
from __future__ import annotations
import contextlib, os, tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .errors import OutputError
from .models import FileEntry, HashResult

REPORT_HEADER = "# msfs-checksum anomaly report"


@dataclass(frozen=True)
class ManifestLine:
    digest: str
    size: int
    path: str

    def render(self) -> bytes:
        return f"{self.digest} {self.size} ".encode("ascii") + os.fsencode(self.path) + b"\n"


@dataclass(frozen=True)
class ProblemLine:
    kind: str
    path: str
    message: str | None = None

    def render(self) -> bytes:
        return f"{self.kind} ".encode("ascii") + os.fsencode(self.path) + b"\n"


class Manifest:
    def __init__(self, lines: list[ManifestLine], problems: list[ProblemLine]):
        self.lines = lines
        self.problems = problems

    def __len__(self) -> int:
        return len(self.lines)

    def render(self) -> bytes:
        return b"".join(l.render() for l in self.lines)

    def render_report(self) -> bytes:
        head = f"{REPORT_HEADER}\n# anomalies: {len(self.problems)}\n".encode("ascii")
        return head + b"".join(p.render() for p in self.problems)

    def write(self, dest: str | Path) -> None:
        atomic_write(dest, self.render())

    def write_report(self, dest: str | Path) -> None:
        atomic_write(dest, self.render_report())


def _key(display: str, absolute: str) -> tuple[bytes, bytes]:
    return os.fsencode(display), os.fsencode(absolute)


def assemble(results: Iterable[HashResult], excluded: Iterable[FileEntry] = (),
             relative: bool = False) -> Manifest:
    """
    Split results into successes and problems and impose the total order.
    `excluded` are entries that were never hashed (links, unreadable entries).
    """
    ok: list[tuple[tuple[bytes, bytes], ManifestLine]] = []
    bad: list[tuple[tuple[bytes, bytes], ProblemLine]] = []

    for r in results:
        shown = r.entry.display_path(relative)
        if r.ok:
            ok.append((_key(shown, r.entry.path), ManifestLine(r.digest, r.size, shown)))
        else:
            bad.append((_key(shown, r.entry.path), ProblemLine(r.failure.value, shown, r.message)))

    for e in excluded:
        shown = e.display_path(relative)
        bad.append((_key(shown, e.path), ProblemLine(e.kind or "excluded", shown, e.error)))

    ok.sort(key=lambda t: t[0])
    bad.sort(key=lambda t: (t[0], t[1].kind))
    return Manifest([l for _, l in ok], [p for _, p in bad])


def atomic_write(dest: str | Path, data: bytes) -> None:
    """
    Write to a temp file beside `dest`, fsync, then os.replace over it.
    An existing file is overwritten; on failure `dest` is left as it was.
    """
    dest = Path(dest)
    tmp = None
    try:
        fd, tmp = tempfile.mkstemp(dir=dest.parent, prefix=dest.name + ".", suffix=".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, dest)
    except OSError as e:
        if tmp is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
        raise OutputError(f"cannot write {dest}: {e}") from e


def read_manifest(path: str | Path) -> list[ManifestLine]:
    lines: list[ManifestLine] = []
    for raw in Path(path).read_bytes().split(b"\n"):
        if not raw:
            continue
        digest, size, name = raw.split(b" ", 2)
        lines.append(ManifestLine(digest.decode("ascii"), int(size), os.fsdecode(name)))
    return lines
