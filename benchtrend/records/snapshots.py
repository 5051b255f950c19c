"""Benchmark history snapshots with a sequence-like collection API."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from benchtrend.records import columns as cols
from benchtrend.sources import HFJsonSource, SourceLike, load_json

logger = logging.getLogger(__name__)

# Top-level keys of a snapshot record that are not metric groups.
_META_KEYS = frozenset({"sha1", "created_at"})


@dataclass(frozen=True)
class Snapshot:
    """One historical benchmark record for a single commit.

    Attributes:
        commit_hash: Full commit hash (``sha1`` in ``data.json``).
        created_at: Timestamp string the record was produced at, if recorded.
        groups: Metric groups keyed by group name (``"benchmark"``,
            ``"throughput"``, ``"binary_size"``, ...). Values are kept as
            parsed from JSON; their shape depends on the group and era.
    """

    commit_hash: str
    created_at: str | None = None
    groups: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Snapshot:
        if not isinstance(raw, Mapping):
            raise ValueError(f"Snapshot record is not an object: {raw!r}")
        commit_hash = raw.get("sha1")
        if not isinstance(commit_hash, str):
            raise ValueError(f"Snapshot record is missing a sha1 string: {sorted(raw)}")
        return cls(
            commit_hash=commit_hash,
            created_at=raw.get("created_at"),
            groups={k: v for k, v in raw.items() if k not in _META_KEYS},
        )

    def group(self, name: str) -> Any:
        """Raw value of the metric group `name`, or None when absent."""
        return self.groups.get(name)

    @property
    def short_hash(self) -> str:
        return self.commit_hash[: cols.SHORT_HASH_LENGTH]


class Snapshots:
    """Immutable, chronologically ordered collection of benchmark snapshots.

    Order is the order of the published history and is never changed.
    Column-producing methods return one column per series, aligned with
    the snapshots by position.

    Example:

        history = Snapshots.from_json("gh-pages/data.json")
        columns = history.exec_time_columns()
        labels = history.short_hashes
    """

    def __init__(self, snapshots: Sequence[Snapshot]) -> None:
        self._snapshots = tuple(snapshots)

    @classmethod
    def from_records(cls, records: Sequence[Mapping[str, Any]]) -> Snapshots:
        """Build a collection from parsed ``data.json`` records."""
        if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
            raise ValueError("Benchmark history must be a JSON array of snapshot records")
        return cls([Snapshot.from_dict(r) for r in records])

    @classmethod
    def from_json(cls, source: SourceLike) -> Snapshots:
        """Load the history from a local path, URL or `JsonSource`."""
        instance = cls.from_records(load_json(source))
        logger.info("Snapshots.from_json: loaded %d snapshots", len(instance))
        return instance

    @classmethod
    def from_hf(
        cls,
        repo_id: str,
        filename: str = "data.json",
        *,
        revision: str | None = None,
    ) -> Snapshots:
        """Load the history published in a Hugging Face dataset repository.

        Args:
            repo_id: HF dataset repository ID.
            filename: Path of the history file within the repo.
            revision: Git revision (branch, tag, or commit hash).
        """
        return cls.from_json(HFJsonSource(repo_id, filename, revision))

    def where(self, predicate: Callable[[Snapshot], bool]) -> Snapshots:
        """Filter snapshots by an arbitrary predicate, preserving order."""
        return Snapshots([s for s in self._snapshots if predicate(s)])

    def last(self, n: int) -> Snapshots:
        """The `n` most recent snapshots."""
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        return Snapshots(self._snapshots[max(len(self._snapshots) - n, 0) :])

    @property
    def commit_hashes(self) -> list[str]:
        return cols.commit_hash_list(self._snapshots)

    @property
    def short_hashes(self) -> list[str]:
        return cols.short_hash_list(self._snapshots)

    def series(self, group: str) -> tuple[str, ...]:
        """Series names of `group`, discovered from the latest snapshot."""
        return cols.series_names(self._snapshots, group)

    def columns(self, group: str) -> list[cols.Column]:
        return cols.project_columns(self._snapshots, group)

    def exec_time_columns(self) -> list[cols.Column]:
        return cols.exec_time_columns(self._snapshots)

    def throughput_columns(self) -> list[cols.Column]:
        return cols.throughput_columns(self._snapshots)

    def req_per_sec_columns(self) -> list[cols.Column]:
        return cols.req_per_sec_columns(self._snapshots)

    def binary_size_columns(self) -> list[cols.Column]:
        return cols.binary_size_columns(self._snapshots)

    def thread_count_columns(self) -> list[cols.Column]:
        return cols.thread_count_columns(self._snapshots)

    def syscall_count_columns(self) -> list[cols.Column]:
        return cols.syscall_count_columns(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __getitem__(self, index: int) -> Snapshot:
        return self._snapshots[index]

    def __bool__(self) -> bool:
        return len(self._snapshots) > 0

    def __repr__(self) -> str:
        return f"Snapshots({len(self._snapshots)} snapshots)"

    def to_dataframe(self, group: str) -> pd.DataFrame:
        """Wide table of `group`, one row per commit and one column per series.

        The index holds the full commit hashes.
        """
        return cols.columns_to_dataframe(self.columns(group), index=self.commit_hashes)
