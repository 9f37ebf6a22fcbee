from __future__ import annotations

import io
from pathlib import Path

import pytest
import xxhash

from msfs_checksum.errors import ReadError
from msfs_checksum.hasher import EMPTY_DIGEST, hash_file, hash_stream


def test_empty_stream_gives_well_known_digest() -> None:
    digest, n = hash_stream(io.BytesIO(b""))
    assert n == 0
    assert digest == EMPTY_DIGEST == xxhash.xxh3_128_hexdigest(b"")
    assert len(digest) == 32


def test_digest_does_not_depend_on_chunk_size() -> None:
    data = bytes(range(256)) * 4099
    whole, n1 = hash_stream(io.BytesIO(data))
    chunked, n2 = hash_stream(io.BytesIO(data), chunk_size=1000)
    assert whole == chunked == xxhash.xxh3_128_hexdigest(data)
    assert n1 == n2 == len(data)


def test_digest_is_lowercase_hex() -> None:
    digest, _ = hash_stream(io.BytesIO(b"Official/asobo-aircraft-c152"))
    assert digest == digest.lower()
    int(digest, 16)


def test_hash_file_matches_stream(tmp_path: Path) -> None:
    p = tmp_path / "layout.json"
    p.write_bytes(b'{"content": []}\n')
    assert hash_file(p) == hash_stream(io.BytesIO(p.read_bytes()))


class _FailingStream(io.RawIOBase):
    def __init__(self) -> None:
        self.calls = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        self.calls += 1
        if self.calls > 2:
            raise OSError(5, "Input/output error")
        return b"x" * 16


def test_read_failure_raises_read_error() -> None:
    with pytest.raises(ReadError) as info:
        hash_stream(_FailingStream(), chunk_size=16)
    assert isinstance(info.value.__cause__, OSError)
    assert "32 bytes" in str(info.value)
