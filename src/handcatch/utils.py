from __future__ import annotations

import time
from typing import Callable


def clamp_int(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def make_ms_clock() -> Callable[[], float]:
    """Milliseconds since this call, on a monotonic clock (like a page's `millis()`)."""
    t0 = time.monotonic()

    def now_ms() -> float:
        return (time.monotonic() - t0) * 1000.0

    return now_ms
