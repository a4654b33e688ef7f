from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Tuple


def iso_now_ms() -> str:
    """UTC ISO-8601 timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def ceil_divide(a: int, b: int) -> int:
    return (a + b - 1) // b


def parse_size(text: str) -> Tuple[int, int]:
    """Parse "WxH" (or "W,H") into a positive (width, height) pair."""
    parts = text.lower().replace(",", "x").split("x")
    if len(parts) != 2:
        raise ValueError(f"Expected WxH, got {text!r}")
    w, h = int(parts[0]), int(parts[1])
    if w <= 0 or h <= 0:
        raise ValueError(f"Size must be positive, got {text!r}")
    return w, h


def timer_ms(func):
    """
    Decorator that returns (result, elapsed_ms) for timing render stages.
    """
    def wrapper(*args, **kwargs):
        t0 = time.perf_counter()
        out = func(*args, **kwargs)
        dt_ms = (time.perf_counter() - t0) * 1e3
        return out, dt_ms
    return wrapper
