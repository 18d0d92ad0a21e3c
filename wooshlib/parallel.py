"""Execution strategies for chunked, data-parallel numpy work.

Whether a reduction runs inline or on a thread pool is decided by the
:class:`ChunkStrategy` the caller passes in, not by the algorithm.  The
kernels are written once against ``(start, end)`` index ranges and are
equally valid for every strategy.  numpy releases the GIL inside its
reductions, so a :class:`~concurrent.futures.ThreadPoolExecutor` gives
real speed-ups on large buffers.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ChunkStrategy:
    """How to split ``n`` items into ranges and where to run them.

    Attributes:
        chunk_size:  Items per range.  ``None`` means "one range, inline".
        max_workers: Thread-pool size.  ``None`` picks ``min(cpu_count, 8)``.
        min_items:   Below this many items the work always runs inline.
    """
    chunk_size: int | None = None
    max_workers: int | None = None
    min_items: int = 0

    @property
    def is_parallel(self) -> bool:
        return self.chunk_size is not None and self.chunk_size > 0

    def workers(self) -> int:
        return max(1, self.max_workers or min(os.cpu_count() or 4, 8))

    def runs_parallel(self, n: int) -> bool:
        """True if *n* items would be dispatched to the pool."""
        if not self.is_parallel or n < self.min_items:
            return False
        return len(split_ranges(n, self)) > 1 and self.workers() > 1


SEQUENTIAL = ChunkStrategy()

# Buffer-wide reductions (peak/RMS scans, gain) above ~10k samples.
BUFFER_PARALLEL = ChunkStrategy(chunk_size=65536, min_items=10_000)

# Waveform columns: fan out from 200 columns, in blocks of 64 columns.
DECIMATE_PARALLEL = ChunkStrategy(chunk_size=64, min_items=200)


def split_ranges(n: int, strategy: ChunkStrategy = SEQUENTIAL) -> list[tuple[int, int]]:
    """Partition ``[0, n)`` into contiguous, disjoint ``(start, end)`` ranges."""
    if n <= 0:
        return []
    if not strategy.is_parallel or n < strategy.min_items:
        return [(0, n)]
    size = int(strategy.chunk_size)
    return [(s, min(s + size, n)) for s in range(0, n, size)]


def map_ranges(
    fn: Callable[[int, int], T],
    n: int,
    strategy: ChunkStrategy = SEQUENTIAL,
) -> list[T]:
    """Call ``fn(start, end)`` for every range of ``[0, n)``, in order.

    Results are returned in range order regardless of which thread
    produced them, so a caller's final reduction is deterministic.
    """
    ranges = split_ranges(n, strategy)
    if len(ranges) <= 1 or strategy.workers() == 1:
        return [fn(s, e) for s, e in ranges]
    workers = min(strategy.workers(), len(ranges))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(fn, s, e) for s, e in ranges]
        return [f.result() for f in futures]
