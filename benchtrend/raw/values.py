"""Tagged readers for the legacy and current `data.json` value shapes.

Historical snapshots were written by several generations of the benchmark
tooling, so the same group can hold differently shaped values depending on
when the commit was measured:

- A group value is either a bare number (legacy, e.g. the whole-binary
  `binary_size`) or a mapping from series name to per-series value.
- A per-series value is either a bare number (legacy) or a record exposing
  a `mean` field (current `benchmark` output).

Readers here classify a raw JSON value into one of these variants without
raising, so callers can branch on the variant explicitly.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

Number = int | float


def is_number(v: object) -> bool:
    """Whether `v` is a JSON number (booleans excluded)."""
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def or_none(v: Any) -> Any:
    """Return `v`, or None when `v` is falsy (`0`, `""`, `False`, NaN, ...)."""
    if not v:
        return None
    if isinstance(v, float) and math.isnan(v):
        return None
    return v


@dataclass(frozen=True)
class ScalarGroup:
    """Legacy group value: one bare number for the whole group.

    Attributes:
        value: The number recorded for the group at this snapshot.
    """

    value: Number


@dataclass(frozen=True)
class KeyedGroup:
    """Current group value: a mapping from series name to value.

    Attributes:
        values: The raw per-series mapping, in the snapshot's key order.
    """

    values: Mapping[str, Any]

    def get(self, name: str) -> Any:
        return self.values.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self.values.keys())


GroupValue = ScalarGroup | KeyedGroup


def parse_group(raw: Any) -> GroupValue | None:
    """Classify a raw group value.

    Returns:
        `ScalarGroup` for a bare number, `KeyedGroup` for a mapping and
        None for anything else (missing, null, strings, lists).
    """
    if is_number(raw):
        return ScalarGroup(raw)
    if isinstance(raw, Mapping):
        return KeyedGroup(raw)
    return None


@dataclass(frozen=True)
class MeanRecord:
    """Per-series record carrying summary statistics of repeated runs.

    Only `mean` is read; the other statistics (`stddev`, `min`, ...) are
    ignored.
    """

    mean: Any


def parse_series_value(raw: Any) -> Number | MeanRecord | None:
    """Classify a raw per-series value as a number, a mean record or nothing."""
    if is_number(raw):
        return raw
    if isinstance(raw, Mapping):
        return MeanRecord(raw.get("mean"))
    return None


def mean_or_none(raw: Any) -> Number | None:
    """Read an execution-time value.

    A mean record yields its `mean` and a bare legacy number yields itself.
    Falsy or non-numeric results map to None.
    """
    parsed = parse_series_value(raw)
    value = parsed.mean if isinstance(parsed, MeanRecord) else parsed
    if not is_number(value):
        return None
    return or_none(value)
