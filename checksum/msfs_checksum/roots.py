# msfs_checksum/roots.py
from __future__ import annotations
import os
from pathlib import Path
from typing import Iterable, Sequence

from .console import log
from .errors import ConfigError, ResolutionError
from .layouts import DEFAULT_PROBES, FALLBACK_PROBES, LayoutProbe
from .models import PackageRoot


def _canonical(p: Path) -> Path:
    return Path(os.path.realpath(p))


def _check_overrides(overrides: Sequence[str | Path]) -> list[PackageRoot]:
    roots: list[PackageRoot] = []
    bad: list[str] = []
    for raw in overrides:
        p = Path(raw).expanduser()
        if not p.exists():
            bad.append(f"{raw}: does not exist")
        elif not p.is_dir():
            bad.append(f"{raw}: not a directory")
        else:
            roots.append(PackageRoot(_canonical(p), "override"))
    if bad:
        # the user asked for these explicitly, so report every one of them
        raise ConfigError("invalid package root override(s):\n  " + "\n  ".join(bad))
    return _dedupe(roots)


def _dedupe(roots: Iterable[PackageRoot]) -> list[PackageRoot]:
    seen: set[Path] = set()
    out: list[PackageRoot] = []
    for r in roots:
        if r.path in seen:
            continue
        seen.add(r.path)
        out.append(r)
    return out


def probe_layouts(probes: Iterable[LayoutProbe]) -> list[PackageRoot]:
    """Run every probe in order and keep those that point at an existing folder."""
    found: list[PackageRoot] = []
    for probe in probes:
        name = getattr(probe, "__name__", repr(probe))
        try:
            root = probe()
        except (OSError, ValueError) as e:
            log(f"[roots] {name}: unreadable install config ({e})")
            continue
        if root is None:
            continue
        if not Path(root.path).is_dir():
            log(f"[roots] {name}: {root.path} is not a folder, skipped")
            continue
        found.append(PackageRoot(_canonical(Path(root.path)), root.source))
    return _dedupe(found)


def resolve_roots(overrides: Sequence[str | Path] = (),
                  probes: Iterable[LayoutProbe] = DEFAULT_PROBES,
                  fallbacks: Iterable[LayoutProbe] = FALLBACK_PROBES) -> list[PackageRoot]:
    """
    Decide which package roots to scan.

    1) If overrides were given, use exactly those (all must be existing folders).
    2) Otherwise run the layout probes and keep every install found;
       a machine may have more than one distribution installed.
    3) Only if none of them resolved, try the fallback probes.
    4) Nothing found -> ResolutionError.
    """
    if overrides:
        return _check_overrides(overrides)
    roots = probe_layouts(probes) or probe_layouts(fallbacks)
    if not roots:
        raise ResolutionError("no package installation found; pass --packages or --config")
    return roots
