"""Tick label formatters for byte sizes and build durations."""

from __future__ import annotations

import math

_BYTE_UNITS = ("Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")


def format_bytes(n: float, decimals: int | None = 2) -> str:
    """Format a byte count with binary (1024) magnitude steps.

    Trailing zeros are dropped, e.g. ``19000 -> "18.55 KB"`` and
    ``1024 -> "1 KB"``. A falsy `decimals` falls back to 2.
    """
    if n == 0:
        return "0 Bytes"
    d = decimals or 2
    f = math.floor(math.log(abs(n)) / math.log(1024))
    f = min(max(f, 0), len(_BYTE_UNITS) - 1)
    value = f"{n / 1024**f:.{d}f}".rstrip("0").rstrip(".")
    return f"{value} {_BYTE_UNITS[f]}"


def format_seconds(t: float) -> str:
    """Format seconds as whole minutes, rounding up from 30 seconds."""
    rest = t % 60
    minutes = math.floor(t / 60)
    if rest < 30:
        return f"{minutes} min"
    return f"{minutes + 1} min"
