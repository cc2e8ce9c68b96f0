"""
Profiling utilities for the Random Users service.

Measures wall-clock time (perf_counter) and peak resident memory (psutil,
sampled from a background thread) of a block of code. Population wraps each
run in `profile_block` so operators can see how long a load took and how much
memory the in-flight batches cost.

Usage:
    from src.utils.profiler import profile_block

    with profile_block("populate") as stats:
        await loader.populate(...)

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
from dataclasses import dataclass, field
from typing import Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    peak_rss_bytes: Optional[int] = field(default=None)


@contextlib.contextmanager
def profile_block(label: str, sample_interval_ms: int = 50) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling. Lower = more accurate but higher overhead.

    Notes
    -----
    The sampler runs in a daemon thread, so it keeps measuring while the
    profiled block awaits on the event loop.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                return
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    sampler = threading.Thread(target=_sample_memory, name=f"profile-{label}", daemon=True)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        stop_sampling.set()
        sampler.join(timeout=1.0)
        stats.peak_rss_bytes = peak_rss or None


__all__ = ["ProfileStats", "profile_block"]
