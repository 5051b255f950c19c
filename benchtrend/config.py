"""Dashboard configuration loaded from YAML."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from benchtrend.records.builds import DEFAULT_CI_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardConfig:
    """Settings for one dashboard rendering pass.

    Attributes:
        data_source: Path or URL of the benchmark history (``data.json``).
        hf_repo_id: If set, read the history from this HF dataset repo
            instead of `data_source`.
        hf_filename: Path of the history file within the HF repo.
        hf_revision: Git revision of the HF repo.
        ci_url: CI build list endpoint.
        repo: GitHub ``owner/name`` used for commit and pull request links.
        out_dir: Directory the rendered charts are written to.
        chart_format: Image format passed to matplotlib (e.g. ``"png"``).
    """

    data_source: str = "./data.json"
    hf_repo_id: str | None = None
    hf_filename: str = "data.json"
    hf_revision: str | None = None
    ci_url: str = DEFAULT_CI_URL
    repo: str = "denoland/deno"
    out_dir: Path = Path("charts")
    chart_format: str = "png"

    @classmethod
    def from_yaml(cls, path: str | Path) -> DashboardConfig:
        """Load a config file. Keys not present keep their defaults.

        Raises:
            ValueError: If the document is not a mapping or has unknown keys.
        """
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid dashboard config (not object): {path}")
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(f"Unknown dashboard config keys in {path}: {unknown}")
        logger.debug("Loaded dashboard config from %s", path)
        return cls().with_overrides(**raw)

    def with_overrides(self, **overrides: Any) -> DashboardConfig:
        """Return a copy with the non-None `overrides` applied."""
        kw = {k: v for k, v in overrides.items() if v is not None}
        if "out_dir" in kw:
            kw["out_dir"] = Path(kw["out_dir"])
        return replace(self, **kw)
