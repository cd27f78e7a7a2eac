"""
Small shared utilities.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generator


@dataclass
class Stopwatch:
    elapsed_ms: int = 0


@contextmanager
def timer() -> Generator[Stopwatch, None, None]:
    """Measure the wall-clock duration of the block in whole milliseconds."""
    watch = Stopwatch()
    start = time.perf_counter()
    try:
        yield watch
    finally:
        watch.elapsed_ms = int((time.perf_counter() - start) * 1000)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
