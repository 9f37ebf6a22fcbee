# msfs_checksum/engine.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable

from tqdm import tqdm

from .console import log, tqdm_file, tqdm_disable
from .errors import ReadError
from .hasher import DEFAULT_CHUNK_SIZE, hash_stream
from .models import Failure, FileEntry, HashResult

# Optional progress callback signature:
#   on_progress(phase: str, current: int, total: int, message: str)


def hash_entry(entry: FileEntry, chunk_size: int = DEFAULT_CHUNK_SIZE) -> HashResult:
    """
    Open, stream and hash one file. Never raises for per-file problems;
    they come back as a failed HashResult.
    """
    try:
        with open(entry.path, "rb") as f:
            digest, n = hash_stream(f, chunk_size)
    except PermissionError as e:
        return HashResult(entry, failure=Failure.PERMISSION_DENIED, message=str(e))
    except FileNotFoundError as e:
        return HashResult(entry, failure=Failure.VANISHED, message=str(e))
    except (OSError, ReadError) as e:
        return HashResult(entry, failure=Failure.IO_ERROR, message=str(e))

    if entry.size is not None and n != entry.size:
        # never publish a digest of a truncated or grown file
        return HashResult(entry, size=n, failure=Failure.SIZE_CHANGED,
                          message=f"size was {entry.size} at scan time, read {n} bytes")
    return HashResult(entry, digest=digest, size=n)


def hash_entries(entries: Iterable[FileEntry], workers: int,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 on_progress=None, use_tqdm: bool = True) -> list[HashResult]:
    """
    Hash every entry on a pool of `workers` threads; returns one result per entry
    in completion order (i.e. no particular order).
    Only a pool that cannot be created (workers < 1) raises.
    """
    entries = list(entries)
    total = len(entries)
    total_bytes = sum(e.size or 0 for e in entries)
    results: list[HashResult] = []
    done = 0

    with tqdm(total=total_bytes, desc="Hashing", unit="B", unit_scale=True, unit_divisor=1024,
              file=tqdm_file(), disable=tqdm_disable(use_tqdm)) as bar:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hash") as ex:
            futs = [ex.submit(hash_entry, e, chunk_size) for e in entries]
            for fut in as_completed(futs):
                res = fut.result()
                results.append(res)
                done += 1
                if not res.ok:
                    log(f"{res.failure.value}: {res.entry.path}: {res.message}")
                if on_progress:
                    on_progress("hash", done, total, f"hashed {done}/{total}")
                bar.update(res.entry.size or 0)
    return results
