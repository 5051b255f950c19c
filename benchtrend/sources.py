"""JSON source abstractions for local, HTTP and Hugging Face-hosted history data."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import requests
from huggingface_hub import hf_hub_download
from huggingface_hub.errors import GatedRepoError, RepositoryNotFoundError

logger = logging.getLogger(__name__)


def _reraise_history_access_error(
    exc: RepositoryNotFoundError,
    repo_id: str,
    filename: str,
) -> None:
    """Re-raise an HF Hub access error naming the history file that was requested.

    Raises:
        GatedRepoError: The history repo is gated; points at its access page.
        RepositoryNotFoundError: The repo is missing or private; says whether
            `HF_TOKEN` was set and where the history is expected.
    """
    history_url = f"https://huggingface.co/datasets/{repo_id}/blob/main/{filename}"
    status = exc.response.status_code if exc.response is not None else "?"
    if isinstance(exc, GatedRepoError):
        raise GatedRepoError(
            f"Benchmark history '{filename}' in '{repo_id}' is gated.\n"
            f"Request access at https://huggingface.co/datasets/{repo_id} "
            f"or point --data at a published copy of the history.",
            response=exc.response,
        ) from None
    token_hint = (
        "HF_TOKEN is set, so check that it can read this repository."
        if os.environ.get("HF_TOKEN")
        else "If the history repo is private, set HF_TOKEN to a token that can read it."
    )
    raise RepositoryNotFoundError(
        f"Could not fetch benchmark history '{filename}' from '{repo_id}' "
        f"(HTTP {status}).\n"
        f"Expected it at {history_url}. {token_hint}",
        response=exc.response,
    ) from None


class JsonSource(Protocol):
    """Common interface for history data sources."""

    def read_json(self) -> Any:
        """Retrieve and parse the JSON document behind this source."""
        ...


@dataclass(frozen=True)
class LocalJsonSource:
    """JSON file on the local filesystem (e.g. a checked-out `data.json`)."""

    path: Path

    def read_json(self) -> Any:
        p = Path(self.path)
        if not p.exists():
            raise FileNotFoundError(f"History file does not exist: {p}")
        return json.loads(p.read_text(encoding="utf-8"))


@dataclass(frozen=True)
class HTTPJsonSource:
    """JSON document served over HTTP.

    No retries are attempted and, unless `timeout` is set, the request
    waits indefinitely.
    """

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None

    def read_json(self, session: requests.Session | None = None) -> Any:
        getter = session.get if session is not None else requests.get
        resp = getter(self.url, headers=self.headers, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()


@dataclass(frozen=True)
class HFJsonSource:
    """JSON file published in a Hugging Face dataset repository.

    Respects the ``HF_HOME`` environment variable for cache location.
    """

    repo_id: str
    filename: str = "data.json"
    revision: str | None = None

    def read_json(self) -> Any:
        return json.loads(self.local_path().read_text(encoding="utf-8"))

    def local_path(self) -> Path:
        try:
            local = hf_hub_download(
                repo_id=self.repo_id,
                filename=self.filename,
                repo_type="dataset",
                revision=self.revision,
            )
        except RepositoryNotFoundError as e:
            _reraise_history_access_error(e, self.repo_id, self.filename)
        return Path(local)


SourceLike = JsonSource | str | Path


def resolve_source(source: SourceLike) -> JsonSource:
    """Resolve a source-like input into a `JsonSource`.

    Strings starting with ``http://`` or ``https://`` become `HTTPJsonSource`;
    other strings and paths become `LocalJsonSource`.
    """
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        resolved: JsonSource = HTTPJsonSource(source)
    elif isinstance(source, (str, Path)):
        resolved = LocalJsonSource(Path(source))
    else:
        resolved = source
    logger.debug("Resolved source: %s", resolved)
    return resolved


def load_json(source: SourceLike) -> Any:
    """Retrieve and parse JSON from `source`.

    Errors from the underlying read or parse (missing file, HTTP error,
    invalid JSON) propagate unchanged.
    """
    return resolve_source(source).read_json()
