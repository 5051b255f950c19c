from __future__ import annotations

from pathlib import Path

import pytest

from benchtrend.config import DashboardConfig
from benchtrend.records.builds import DEFAULT_CI_URL


def test_defaults() -> None:
    config = DashboardConfig()
    assert config.data_source == "./data.json"
    assert config.ci_url == DEFAULT_CI_URL
    assert config.repo == "denoland/deno"
    assert config.out_dir == Path("charts")


def test_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "dashboard.yaml"
    path.write_text("data_source: gh-pages/data.json\nrepo: org/project\nout_dir: out\n")
    config = DashboardConfig.from_yaml(path)
    assert config.data_source == "gh-pages/data.json"
    assert config.repo == "org/project"
    assert config.out_dir == Path("out")
    assert config.chart_format == "png"


def test_from_empty_yaml(tmp_path: Path) -> None:
    path = tmp_path / "dashboard.yaml"
    path.write_text("")
    assert DashboardConfig.from_yaml(path) == DashboardConfig()


def test_from_yaml_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "dashboard.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="not object"):
        DashboardConfig.from_yaml(path)


def test_from_yaml_rejects_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "dashboard.yaml"
    path.write_text("retries: 3\n")
    with pytest.raises(ValueError, match="retries"):
        DashboardConfig.from_yaml(path)


def test_with_overrides_ignores_none() -> None:
    config = DashboardConfig().with_overrides(repo=None, out_dir="elsewhere", hf_repo_id="org/h")
    assert config.repo == "denoland/deno"
    assert config.out_dir == Path("elsewhere")
    assert config.hf_repo_id == "org/h"
