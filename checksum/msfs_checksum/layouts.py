# msfs_checksum/layouts.py
"""
Known MSFS 2020 install layouts.

Both the Microsoft Store and the Steam build keep a ``UserCfg.opt`` file
whose ``InstalledPackagesPath "<dir>"`` line points at the package folder.
The scanned root is the ``Official`` folder beneath it.

Each probe takes no arguments and returns a PackageRoot or None.
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Callable, Optional

from .models import PackageRoot

USERCFG_NAME = "UserCfg.opt"
PACKAGES_KEY = "InstalledPackagesPath"
OFFICIAL_DIR = "Official"

STORE_MSFS_DIR_NAME = "Microsoft.FlightSimulator_8wekyb3d8bbwe"
STEAM_MSFS_DIR_NAME = "Microsoft Flight Simulator"

LayoutProbe = Callable[[], Optional[PackageRoot]]


def _env_dir(name: str) -> Path | None:
    v = os.environ.get(name)
    return Path(v) if v else None


def read_packages_path(usercfg: str | Path) -> Path | None:
    """Return the InstalledPackagesPath value from a UserCfg.opt, or None if absent."""
    text = Path(usercfg).read_text(encoding="utf-8")
    for line in text.splitlines():
        line = line.strip()
        if not line.startswith(PACKAGES_KEY):
            continue
        _, _, value = line.partition(" ")
        value = value.strip().strip('"')
        if value:
            return Path(value)
    return None


def root_from_usercfg(usercfg: str | Path, source: str) -> PackageRoot | None:
    packages = read_packages_path(usercfg)
    if packages is None:
        return None
    return PackageRoot(packages / OFFICIAL_DIR, source)


def usercfg_probe(usercfg: str | Path, source: str = "config") -> LayoutProbe:
    def probe() -> PackageRoot | None:
        if not Path(usercfg).is_file():
            return None
        return root_from_usercfg(usercfg, source)
    probe.__name__ = f"{source}_probe"
    return probe


def store_probe() -> PackageRoot | None:
    base = _env_dir("LOCALAPPDATA")
    if base is None:
        return None
    cfg = base / "Packages" / STORE_MSFS_DIR_NAME / "LocalCache" / USERCFG_NAME
    return usercfg_probe(cfg, "store")()


def steam_probe() -> PackageRoot | None:
    base = _env_dir("APPDATA")
    if base is None:
        return None
    return usercfg_probe(base / STEAM_MSFS_DIR_NAME / USERCFG_NAME, "steam")()


def search_probe() -> PackageRoot | None:
    # last resort: any UserCfg.opt under the roaming profile that looks like MSFS
    base = _env_dir("APPDATA")
    if base is None or not base.is_dir():
        return None
    for dirpath, _, files in os.walk(base):
        if USERCFG_NAME not in files:
            continue
        cfg = Path(dirpath, USERCFG_NAME)
        lowered = str(cfg).lower()
        if "microsoft" in lowered and "flight" in lowered:
            return root_from_usercfg(cfg, "search")
    return None


DEFAULT_PROBES: tuple[LayoutProbe, ...] = (store_probe, steam_probe)
# walks the whole roaming profile, so only tried when nothing above resolved
FALLBACK_PROBES: tuple[LayoutProbe, ...] = (search_probe,)
