"""Timing traces for Woosh.

Set ``WOOSH_DEBUG=1`` (or ``true``) to get lines like::

    [14:02:11.207 Pipeline] kick.wav: compressor 4.2 ms

on stderr.  Everything else goes through :mod:`logging`.
"""

from __future__ import annotations

import os
import sys
import time
from contextlib import contextmanager
from typing import Iterator

_ENABLED: bool | None = None


def enabled() -> bool:
    """True when ``WOOSH_DEBUG`` asks for traces.  Read once, then cached."""
    global _ENABLED
    if _ENABLED is None:
        _ENABLED = os.environ.get("WOOSH_DEBUG", "").strip().lower() in ("1", "true")
    return _ENABLED


def _origin(depth: int) -> str:
    """Class of ``self`` in the frame *depth* levels up, else its module's short name."""
    frame = sys._getframe(depth + 1)
    owner = frame.f_locals.get("self")
    if owner is not None:
        return type(owner).__name__
    return frame.f_globals.get("__name__", "?").rpartition(".")[2]


def _write(origin: str, msg: str) -> None:
    now = time.time()
    stamp = time.strftime("%H:%M:%S", time.localtime(now))
    print(f"[{stamp}.{int(now % 1 * 1000):03d} {origin}] {msg}",
          file=sys.stderr, flush=True)


def dbg(msg: str) -> None:
    if enabled():
        _write(_origin(1), msg)


@contextmanager
def timed(label: str) -> Iterator[None]:
    """Trace how long the ``with`` body took as ``<label> <ms> ms``."""
    if not enabled():
        yield
        return
    # frame 0 is this generator, 1 contextlib's __enter__, 2 the with statement
    origin = _origin(2)
    t0 = time.perf_counter()
    try:
        yield
    finally:
        _write(origin, f"{label} {(time.perf_counter() - t0) * 1000:.1f} ms")
