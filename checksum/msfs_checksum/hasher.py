# msfs_checksum/hasher.py
from __future__ import annotations
from pathlib import Path
from typing import BinaryIO

import xxhash  # very fast non-crypto hash, 128-bit XXH3

from .errors import ReadError

# 8 MiB per read. Large sequential reads matter on spinning disks;
# on NVMe the size makes little difference.
DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024

EMPTY_DIGEST = xxhash.xxh3_128_hexdigest(b"")


def hash_stream(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> tuple[str, int]:
    """
    Hash a binary stream to the end.
    Returns (hexdigest, bytes_read). The hex form is the canonical
    big-endian rendering, identical on every platform.
    Raises ReadError if the stream fails part way; no partial digest is returned.
    """
    h = xxhash.xxh3_128()
    total = 0
    try:
        for chunk in iter(lambda: stream.read(chunk_size), b""):
            h.update(chunk)
            total += len(chunk)
    except OSError as e:
        raise ReadError(f"read failed after {total} bytes: {e}") from e
    return h.hexdigest(), total


def hash_file(path: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> tuple[str, int]:
    with open(path, "rb") as f:
        return hash_stream(f, chunk_size)
