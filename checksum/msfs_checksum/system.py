# msfs_checksum/system.py
from __future__ import annotations
import os
import psutil
import cpuinfo

from .console import log, format_bytes
from .errors import ConfigError


def optimal_threads(requested: int | None = 0) -> int:
    """Worker count: the explicit request, or one per logical core when 0/None."""
    if requested is None or requested == 0:
        return max(1, psutil.cpu_count(logical=True) or os.cpu_count() or 1)
    if requested < 0:
        raise ConfigError(f"thread count must be >= 0, got {requested}")
    return requested


def check_resources(workers: int, chunk_size: int) -> None:
    # every worker holds one read buffer at a time
    need = workers * chunk_size
    avail = psutil.virtual_memory().available
    if need > avail // 2:
        log(f"WARNING: read buffers need {format_bytes(need)}, "
            f"only {format_bytes(avail)} memory available; consider fewer threads")


def describe_host() -> str:
    # informational only; a cpuinfo failure must not stop a scan
    try:
        info = cpuinfo.get_cpu_info()
    except Exception:
        info = {}
    brand = info.get("brand_raw") or info.get("arch") or "CPU"
    flags = info.get("flags", [])
    if "avx2" in flags:
        simd = "avx2"
    elif "sse2" in flags:
        simd = "sse2"
    else:
        simd = "scalar" if flags else "simd unknown"
    return f"{brand} ({psutil.cpu_count(logical=True)} logical cores, {simd})"
