"""Render the performance dashboard from benchmark history and CI builds.

Two independent pipelines feed the dashboard:

- benchmark pipeline: ``data.json`` -> execution time, throughput,
  requests/sec, binary size, thread count and syscall count charts.
- CI pipeline: build list API -> compile time chart.

They run concurrently; a failure in one is logged and does not stop the
other.

Usage::

    benchtrend-dashboard --data gh-pages/data.json --out-dir charts
    benchtrend-dashboard --config dashboard.yaml --skip-ci
"""

from __future__ import annotations

import argparse
import logging
import webbrowser
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from benchtrend.config import DashboardConfig
from benchtrend.formatting import format_bytes, format_seconds
from benchtrend.presenter import ChartPresenter, ChartSpec, MatplotlibPresenter
from benchtrend.records.builds import Builds
from benchtrend.records.columns import Column
from benchtrend.records.snapshots import Snapshots
from benchtrend.sources import HFJsonSource, SourceLike

logger = logging.getLogger(__name__)


def commit_url(repo: str, commit_hash: str) -> str:
    return f"https://github.com/{repo}/commit/{commit_hash}"


def pull_request_url(repo: str, number: Any) -> str:
    return f"https://github.com/{repo}/pull/{number}"


def _open_on_click(urls: Sequence[str]) -> Callable[[int], None]:
    def on_click(index: int) -> None:
        webbrowser.open(urls[index])

    return on_click


@dataclass(frozen=True)
class _BenchmarkChart:
    name: str
    columns: Callable[[Snapshots], list[Column]]
    full_hashes: bool = False
    y_label: str | None = None
    y_format: Callable[[float], str] | None = None


# Rendering order of the benchmark pipeline.
BENCHMARK_CHARTS = (
    _BenchmarkChart("exec-time-chart", Snapshots.exec_time_columns, True, "seconds"),
    _BenchmarkChart("throughput-chart", Snapshots.throughput_columns, y_label="seconds"),
    _BenchmarkChart("req-per-sec-chart", Snapshots.req_per_sec_columns, y_label="seconds"),
    _BenchmarkChart("binary-size-chart", Snapshots.binary_size_columns, y_format=format_bytes),
    _BenchmarkChart("thread-count-chart", Snapshots.thread_count_columns),
    _BenchmarkChart("syscall-count-chart", Snapshots.syscall_count_columns),
)


@dataclass
class PipelineResult:
    """Outcome of one dashboard pipeline.

    Attributes:
        rendered: Chart specs handed to the presenter, in rendering order.
        failed: Names of charts whose data preparation or rendering raised.
    """

    rendered: list[ChartSpec] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def benchmark_chart(
    chart: _BenchmarkChart,
    history: Snapshots,
    *,
    repo: str,
) -> ChartSpec:
    """Build the spec of one benchmark chart."""
    hashes = history.commit_hashes
    return ChartSpec(
        name=chart.name,
        columns=chart.columns(history),
        categories=hashes if chart.full_hashes else history.short_hashes,
        show_x_axis=False,
        y_label=chart.y_label,
        y_format=chart.y_format,
        on_click=_open_on_click([commit_url(repo, h) for h in hashes]),
    )


def ci_charts(builds: Builds, *, repo: str) -> list[ChartSpec]:
    """Build the chart specs of the CI pipeline."""
    pr_numbers = builds.pull_request_numbers
    return [
        ChartSpec(
            name="travis-compile-time-chart",
            columns=builds.compile_time_columns(),
            categories=pr_numbers,
            y_format=format_seconds,
            on_click=_open_on_click([pull_request_url(repo, n) for n in pr_numbers]),
        )
    ]


def draw_charts_from_benchmark_data(
    source: SourceLike,
    presenter: ChartPresenter,
    *,
    repo: str = "denoland/deno",
) -> PipelineResult:
    """Load the benchmark history and render its charts.

    Each chart is prepared and rendered on its own; a chart that fails is
    logged and skipped so the remaining charts still render.
    """
    history = Snapshots.from_json(source)
    result = PipelineResult()
    for chart in BENCHMARK_CHARTS:
        try:
            spec = benchmark_chart(chart, history, repo=repo)
            presenter.render(spec)
        except Exception:
            logger.error("Failed to render %s", chart.name, exc_info=True)
            result.failed.append(chart.name)
            continue
        result.rendered.append(spec)
    return result


def draw_charts_from_ci_data(
    url: str,
    presenter: ChartPresenter,
    *,
    repo: str = "denoland/deno",
) -> PipelineResult:
    """Load CI builds with a positive duration and render the compile time chart."""
    builds = Builds.from_api(url).with_duration()
    result = PipelineResult()
    for chart in ci_charts(builds, repo=repo):
        presenter.render(chart)
        result.rendered.append(chart)
    return result


def _history_source(config: DashboardConfig) -> SourceLike:
    if config.hf_repo_id is not None:
        return HFJsonSource(config.hf_repo_id, config.hf_filename, config.hf_revision)
    return config.data_source


def run_dashboard(
    config: DashboardConfig,
    presenter: ChartPresenter,
    *,
    skip_ci: bool = False,
) -> list[str]:
    """Run the dashboard pipelines concurrently.

    A pipeline fails when loading its data raises or when any of its
    charts could not be rendered.

    Returns:
        Names of the pipelines that failed (empty when all succeeded).
    """
    pipelines: dict[str, Callable[[], PipelineResult]] = {
        "benchmark": lambda: draw_charts_from_benchmark_data(
            _history_source(config), presenter, repo=config.repo
        ),
    }
    if not skip_ci:
        pipelines["ci"] = lambda: draw_charts_from_ci_data(
            config.ci_url, presenter, repo=config.repo
        )

    failed: list[str] = []
    with ThreadPoolExecutor(max_workers=len(pipelines)) as pool:
        futures = {name: pool.submit(fn) for name, fn in pipelines.items()}
        for name, future in futures.items():
            try:
                result = future.result()
            except Exception:
                logger.error("Pipeline %r failed", name, exc_info=True)
                failed.append(name)
                continue
            logger.info("Pipeline %r rendered %d charts", name, len(result.rendered))
            if result.failed:
                logger.error("Pipeline %r failed charts: %s", name, ", ".join(result.failed))
                failed.append(name)
    return failed


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Render performance trend charts from benchmark history and CI builds"
    )
    parser.add_argument("--config", type=str, default=None, help="YAML dashboard config file")
    parser.add_argument("--data", type=str, default=None, help="Path or URL of data.json")
    parser.add_argument(
        "--hf-repo",
        type=str,
        default=None,
        help="HF dataset repo holding data.json (overrides --data)",
    )
    parser.add_argument("--ci-url", type=str, default=None, help="CI build list endpoint")
    parser.add_argument("--repo", type=str, default=None, help="GitHub owner/name for links")
    parser.add_argument("--out-dir", type=str, default=None, help="Output directory for charts")
    parser.add_argument("--skip-ci", action="store_true", help="Do not render CI charts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    config = DashboardConfig.from_yaml(args.config) if args.config else DashboardConfig()
    config = config.with_overrides(
        data_source=args.data,
        hf_repo_id=args.hf_repo,
        ci_url=args.ci_url,
        repo=args.repo,
        out_dir=args.out_dir,
    )
    presenter = MatplotlibPresenter(config.out_dir, fmt=config.chart_format)
    failed = run_dashboard(config, presenter, skip_ci=args.skip_ci)
    if failed:
        logger.error("Failed pipelines: %s", ", ".join(failed))
        return 1
    logger.info("Done. Output directory: %s", config.out_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
