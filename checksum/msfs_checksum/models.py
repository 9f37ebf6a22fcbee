# msfs_checksum/models.py
from __future__ import annotations
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class Anomaly(str, Enum):
    SYMLINK = "symlink"
    HARDLINK = "hard-link-suspected"
    UNREADABLE_METADATA = "unreadable-metadata"
    UNREADABLE_DIRECTORY = "unreadable-directory"
    SPECIAL_FILE = "special-file"


class Failure(str, Enum):
    IO_ERROR = "io-error"
    PERMISSION_DENIED = "permission-denied"
    SIZE_CHANGED = "size-changed"
    VANISHED = "vanished"


# hard links are still hashed; every other anomaly keeps the entry out of the pool
_EXCLUDING = frozenset(a for a in Anomaly if a is not Anomaly.HARDLINK)


@dataclass(frozen=True)
class PackageRoot:
    path: Path
    source: str

    def __str__(self) -> str:
        return f"{self.path} [{self.source}]"


@dataclass(frozen=True)
class FileEntry:
    path: str
    size: Optional[int]
    anomalies: frozenset = field(default_factory=frozenset)
    root: Optional[PackageRoot] = None
    error: Optional[str] = None

    @property
    def hashable(self) -> bool:
        return not (self.anomalies & _EXCLUDING)

    @property
    def kind(self) -> Optional[str]:
        """The excluding anomaly reported for this entry, if any."""
        for a in Anomaly:
            if a in self.anomalies and a in _EXCLUDING:
                return a.value
        return None

    def display_path(self, relative: bool = False) -> str:
        if relative and self.root is not None:
            try:
                return Path(os.path.relpath(self.path, self.root.path)).as_posix()
            except ValueError:
                # different drive on Windows
                return self.path
        return self.path


@dataclass(frozen=True)
class HashResult:
    entry: FileEntry
    digest: Optional[str] = None
    size: Optional[int] = None
    failure: Optional[Failure] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.digest is not None
