"""Projection of snapshot histories into chart columns.

A column is a plain list whose first element is the series label and whose
remaining elements hold one value per input record, in input order:

    ["hello", 0.021, None, 0.019]

`None` marks a position without a value so the chart shows a gap.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import pandas as pd

from benchtrend.raw.values import (
    KeyedGroup,
    ScalarGroup,
    mean_or_none,
    or_none,
    parse_group,
)

if TYPE_CHECKING:
    from benchtrend.records.builds import BuildRecord
    from benchtrend.records.snapshots import Snapshot

logger = logging.getLogger(__name__)

Column = list[Any]

EXEC_TIME_GROUP = "benchmark"
THROUGHPUT_GROUP = "throughput"
REQ_PER_SEC_GROUP = "req_per_sec"
BINARY_SIZE_GROUP = "binary_size"
THREAD_COUNT_GROUP = "thread_count"
SYSCALL_COUNT_GROUP = "syscall_count"

# Series that owned the single legacy `binary_size` number.
LEGACY_BINARY_SIZE_SERIES = "deno"
COMPILE_TIME_SERIES = "duration_time"
SHORT_HASH_LENGTH = 6


def series_names(snapshots: Sequence[Snapshot], group: str) -> tuple[str, ...]:
    """Discover the series of `group` from the most recent snapshot.

    Earlier snapshots are never inspected.

    Args:
        snapshots: Snapshot history, oldest first.
        group: Metric group name (e.g. `"throughput"`).

    Returns:
        Series names in the key order of the last snapshot's group. A legacy
        bare number has no named series and yields an empty tuple.

    Raises:
        ValueError: If the history is empty or the last snapshot has neither
            a number nor a mapping for `group`.
    """
    if not snapshots:
        raise ValueError(f"Cannot discover {group!r} series from an empty history")
    last = snapshots[-1]
    parsed = parse_group(last.group(group))
    if isinstance(parsed, ScalarGroup):
        return ()
    if not isinstance(parsed, KeyedGroup):
        raise ValueError(
            f"Group {group!r} is missing or malformed in the latest snapshot "
            f"(commit {last.commit_hash})"
        )
    return parsed.names()


def _project_value(raw_group: Any, name: str, group: str) -> Any:
    parsed = parse_group(raw_group)
    if not isinstance(parsed, KeyedGroup):
        return None
    v = parsed.get(name)
    if v is None:
        return None
    if group == EXEC_TIME_GROUP:
        return mean_or_none(v)
    return v


def project_columns(snapshots: Sequence[Snapshot], group: str) -> list[Column]:
    """Build one column per series of `group`, aligned across all snapshots.

    Values are passed through unchanged except for the `benchmark` group,
    where the `mean` of each record is read (see `mean_or_none`).
    """
    names = series_names(snapshots, group)
    columns = [
        [name, *(_project_value(s.group(group), name, group) for s in snapshots)]
        for name in names
    ]
    logger.debug(
        "Projected %d %r columns over %d snapshots", len(columns), group, len(snapshots)
    )
    return columns


def exec_time_columns(snapshots: Sequence[Snapshot]) -> list[Column]:
    return project_columns(snapshots, EXEC_TIME_GROUP)


def throughput_columns(snapshots: Sequence[Snapshot]) -> list[Column]:
    return project_columns(snapshots, THROUGHPUT_GROUP)


def req_per_sec_columns(snapshots: Sequence[Snapshot]) -> list[Column]:
    return project_columns(snapshots, REQ_PER_SEC_GROUP)


def _keyed_or_none(raw_group: Any, name: str) -> Any:
    parsed = parse_group(raw_group)
    if not isinstance(parsed, KeyedGroup):
        return None
    return or_none(parsed.get(name))


def binary_size_columns(snapshots: Sequence[Snapshot]) -> list[Column]:
    """Build binary size columns, accepting the legacy single-number format.

    A legacy snapshot recorded one number for the `deno` executable only, so
    every other series reads 0 at that position. Keyed values that are falsy
    (including a genuine 0) become None.
    """

    def value(raw_group: Any, name: str) -> Any:
        parsed = parse_group(raw_group)
        if isinstance(parsed, ScalarGroup):
            return parsed.value if name == LEGACY_BINARY_SIZE_SERIES else 0
        return _keyed_or_none(raw_group, name)

    names = series_names(snapshots, BINARY_SIZE_GROUP)
    return [
        [name, *(value(s.group(BINARY_SIZE_GROUP), name) for s in snapshots)]
        for name in names
    ]


def _keyed_columns(snapshots: Sequence[Snapshot], group: str) -> list[Column]:
    names = series_names(snapshots, group)
    return [[name, *(_keyed_or_none(s.group(group), name) for s in snapshots)] for name in names]


def thread_count_columns(snapshots: Sequence[Snapshot]) -> list[Column]:
    return _keyed_columns(snapshots, THREAD_COUNT_GROUP)


def syscall_count_columns(snapshots: Sequence[Snapshot]) -> list[Column]:
    return _keyed_columns(snapshots, SYSCALL_COUNT_GROUP)


def compile_time_columns(builds: Sequence[BuildRecord]) -> list[Column]:
    """Single `duration_time` column with one build duration per build."""
    return [[COMPILE_TIME_SERIES, *(b.duration for b in builds)]]


def commit_hash_list(snapshots: Sequence[Snapshot]) -> list[str]:
    return [s.commit_hash for s in snapshots]


def short_hash_list(snapshots: Sequence[Snapshot]) -> list[str]:
    return [h[:SHORT_HASH_LENGTH] for h in commit_hash_list(snapshots)]


def pull_request_list(builds: Sequence[BuildRecord]) -> list[Any]:
    return [b.pull_request_number for b in builds]


def columns_to_dataframe(
    columns: Sequence[Column],
    index: Sequence[Any] | None = None,
) -> pd.DataFrame:
    """Convert columns into a wide DataFrame.

    Args:
        columns: Columns as returned by the projection functions.
        index: Optional row labels (e.g. commit hashes), one per position.

    Returns:
        DataFrame with one float column per series, gaps as NaN.
    """
    if not columns:
        return pd.DataFrame(index=(pd.Index(list(index)) if index is not None else None))
    data = {col[0]: pd.Series(col[1:], dtype="float64") for col in columns}
    df = pd.DataFrame(data)
    if index is not None:
        if len(index) != len(df):
            raise ValueError(f"Index has {len(index)} labels but columns have {len(df)} rows")
        df.index = pd.Index(list(index))
    return df
