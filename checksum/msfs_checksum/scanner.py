# msfs_checksum/scanner.py
from __future__ import annotations
import os, stat
from typing import Iterator

from .models import Anomaly, FileEntry, PackageRoot

_REPARSE_POINT = getattr(stat, "FILE_ATTRIBUTE_REPARSE_POINT", 0x400)


def _is_link(st: os.stat_result) -> bool:
    # symlinks everywhere, plus junctions / other reparse points on Windows
    if stat.S_ISLNK(st.st_mode):
        return True
    return bool(getattr(st, "st_file_attributes", 0) & _REPARSE_POINT)


def _lstat(entry: os.DirEntry) -> os.stat_result:
    if os.name == "nt":
        # DirEntry.stat() leaves st_nlink at 0 on Windows
        return os.stat(entry.path, follow_symlinks=False)
    return entry.stat(follow_symlinks=False)


def scan_root(root: PackageRoot) -> Iterator[FileEntry]:
    """
    Walk one package root depth-first and yield a FileEntry per object found.

    - Links are never followed; they come back flagged as symlinks.
    - Regular files with a link count > 1 are flagged hard-link-suspected but stay hashable.
    - A directory that cannot be listed yields one unreadable-directory entry
      and the walk carries on with its siblings.
    - Children are visited in name order, so re-walking an unchanged tree
      yields the same sequence.

    The generator is lazy; calling it again starts a fresh walk.
    """
    stack = [str(root.path)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            yield FileEntry(current, None, frozenset({Anomaly.UNREADABLE_DIRECTORY}), root, str(e))
            continue

        subdirs: list[str] = []
        for entry in children:
            try:
                st = _lstat(entry)
            except OSError as e:
                yield FileEntry(entry.path, None, frozenset({Anomaly.UNREADABLE_METADATA}), root, str(e))
                continue

            if _is_link(st):
                yield FileEntry(entry.path, None, frozenset({Anomaly.SYMLINK}), root)
            elif stat.S_ISDIR(st.st_mode):
                subdirs.append(entry.path)
            elif stat.S_ISREG(st.st_mode):
                flags = frozenset({Anomaly.HARDLINK}) if st.st_nlink > 1 else frozenset()
                yield FileEntry(entry.path, st.st_size, flags, root)
            else:
                # fifo / socket / device: opening it could block forever
                yield FileEntry(entry.path, None, frozenset({Anomaly.SPECIAL_FILE}), root)

        # pop order == name order
        stack.extend(reversed(subdirs))


def scan_roots(roots: list[PackageRoot]) -> Iterator[FileEntry]:
    for root in roots:
        yield from scan_root(root)
