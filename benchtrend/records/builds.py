"""CI build records loaded from a Travis-style build list API."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd
import requests

from benchtrend.records import columns as cols
from benchtrend.sources import HTTPJsonSource

logger = logging.getLogger(__name__)

DEFAULT_CI_URL = "https://api.travis-ci.com/repos/denoland/deno/builds?event_type=pull_request"
CI_ACCEPT_HEADER = "application/vnd.travis-ci.2.1+json"


@dataclass(frozen=True)
class BuildRecord:
    """A single CI build.

    Attributes:
        duration: Build duration in seconds (None while a build is running).
        pull_request_number: Pull request the build was triggered for.
        id: CI-side build identifier.
        number: Human-facing build number.
        state: Build state (e.g. ``"passed"``, ``"failed"``).
        started_at: ISO timestamp the build started at.
        finished_at: ISO timestamp the build finished at.
        commit_id: CI-side identifier of the built commit.
    """

    duration: float | None
    pull_request_number: int | None
    id: int | None = None
    number: str | None = None
    state: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    commit_id: int | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> BuildRecord:
        if not isinstance(raw, Mapping):
            raise ValueError(f"Build record is not an object: {raw!r}")
        return cls(
            duration=raw.get("duration"),
            pull_request_number=raw.get("pull_request_number"),
            id=raw.get("id"),
            number=raw.get("number"),
            state=raw.get("state"),
            started_at=raw.get("started_at"),
            finished_at=raw.get("finished_at"),
            commit_id=raw.get("commit_id"),
        )


def _has_duration(build: BuildRecord) -> bool:
    return build.duration is not None and build.duration > 0


class Builds:
    """Immutable, chronologically ordered collection of CI builds.

    Example:

        builds = Builds.from_api().with_duration()
        columns = builds.compile_time_columns()
        labels = builds.pull_request_numbers
    """

    def __init__(self, builds: Sequence[BuildRecord]) -> None:
        self._builds = tuple(builds)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Builds:
        """Build a collection from a build-list response envelope.

        The API lists builds newest first; the collection holds them oldest
        first.

        Raises:
            ValueError: If the payload has no ``builds`` list.
        """
        raw_builds = payload.get("builds") if isinstance(payload, Mapping) else None
        if not isinstance(raw_builds, list):
            raise ValueError("CI response is missing a 'builds' list")
        return cls([BuildRecord.from_dict(b) for b in reversed(raw_builds)])

    @classmethod
    def from_api(
        cls,
        url: str = DEFAULT_CI_URL,
        predicate: Callable[[BuildRecord], bool] | None = None,
        *,
        session: requests.Session | None = None,
    ) -> Builds:
        """Fetch the build list from the CI API.

        Args:
            url: Build list endpoint.
            predicate: If given, keep only builds for which it returns True.
                Applied after the list is put in chronological order.
            session: Optional `requests.Session` to issue the request with.
        """
        source = HTTPJsonSource(url, headers={"Accept": CI_ACCEPT_HEADER})
        builds = cls.from_payload(source.read_json(session=session))
        if predicate is not None:
            builds = builds.where(predicate)
        logger.info("Builds.from_api: loaded %d builds from %s", len(builds), url)
        return builds

    def where(self, predicate: Callable[[BuildRecord], bool]) -> Builds:
        """Filter builds by an arbitrary predicate, preserving order."""
        return Builds([b for b in self._builds if predicate(b)])

    def with_duration(self) -> Builds:
        """Builds that report a positive duration."""
        return self.where(_has_duration)

    @property
    def durations(self) -> list[float | None]:
        return [b.duration for b in self._builds]

    @property
    def pull_request_numbers(self) -> list[int | None]:
        return cols.pull_request_list(self._builds)

    def compile_time_columns(self) -> list[cols.Column]:
        return cols.compile_time_columns(self._builds)

    def __iter__(self) -> Iterator[BuildRecord]:
        return iter(self._builds)

    def __len__(self) -> int:
        return len(self._builds)

    def __getitem__(self, index: int) -> BuildRecord:
        return self._builds[index]

    def __bool__(self) -> bool:
        return len(self._builds) > 0

    def __repr__(self) -> str:
        return f"Builds({len(self._builds)} builds)"

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per build."""
        if not self._builds:
            return pd.DataFrame()
        return pd.DataFrame([dataclasses.asdict(b) for b in self._builds])


def load_build_history(
    url: str = DEFAULT_CI_URL,
    predicate: Callable[[BuildRecord], bool] | None = None,
    *,
    session: requests.Session | None = None,
) -> Builds:
    """Fetch CI builds in chronological order. See `Builds.from_api`."""
    return Builds.from_api(url, predicate, session=session)
