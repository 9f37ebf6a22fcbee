# msfs_checksum/console.py
from __future__ import annotations
import io, os, sys

from tqdm import tqdm


def log(msg: str) -> None:
    """
    Write a status line to stderr without tearing an active progress bar.
    - tqdm.write when there is a real stderr.
    - plain stdout when stderr is gone (windowed builds).
    """
    f = getattr(sys, "stderr", None)
    if f is not None and hasattr(f, "write"):
        tqdm.write(msg, file=f)
    else:
        print(msg)


def tqdm_file():
    """
    Return a file-like object for tqdm to write to.
    Without a stderr, fall back to a sink.
    """
    f = getattr(sys, "stderr", None)
    return f if (f is not None and hasattr(f, "write")) else io.StringIO()


def tqdm_disable(use_tqdm: bool = True) -> bool:
    """
    Disable tqdm when there is no real stderr or when the caller asked.
    Env override: MSFS_CHECKSUM_TQDM=0 forces enable, =1 forces disable.
    """
    env = os.environ.get("MSFS_CHECKSUM_TQDM")
    if env == "0":
        return False
    if env == "1":
        return True
    if not use_tqdm:
        return True
    f = getattr(sys, "stderr", None)
    return not (f is not None and hasattr(f, "write"))


def format_bytes(n: int) -> str:
    size = float(n)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TiB"
