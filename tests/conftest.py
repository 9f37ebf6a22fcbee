from __future__ import annotations

import builtins
import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _no_progress_bars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MSFS_CHECKSUM_TQDM", "1")


def make_tree(base: Path, files: dict[str, bytes]) -> Path:
    base.mkdir(parents=True, exist_ok=True)
    for rel, data in files.items():
        p = base / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
    return base


def try_symlink(target: Path, link: Path, target_is_directory: bool = False) -> None:
    try:
        os.symlink(target, link, target_is_directory=target_is_directory)
    except (OSError, NotImplementedError) as e:
        pytest.skip(f"symlinks not available here: {e}")


def deny_open(monkeypatch: pytest.MonkeyPatch, module, denied: set[str]) -> None:
    """Make `open` inside `module` raise PermissionError for the given paths."""

    def fake_open(path, mode="r", *args, **kwargs):
        if str(path) in denied:
            raise PermissionError(13, "Permission denied", str(path))
        return builtins.open(path, mode, *args, **kwargs)

    monkeypatch.setattr(module, "open", fake_open, raising=False)
