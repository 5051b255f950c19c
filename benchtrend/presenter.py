"""Chart rendering boundary.

Projection code hands each chart to a `ChartPresenter` as a `ChartSpec`, so
the data preparation can be exercised without any rendering backend.
`MatplotlibPresenter` is the bundled backend and writes one image per chart.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import numpy as np
from matplotlib.backend_bases import PickEvent
from matplotlib.figure import Figure
from matplotlib.ticker import FuncFormatter

from benchtrend.raw.values import is_number
from benchtrend.records.columns import Column

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartSpec:
    """Everything needed to draw one trend chart.

    Attributes:
        name: Chart identifier, also used as the output file stem.
        columns: Series columns (label followed by one value per position).
        categories: x-axis category labels, one per position.
        show_x_axis: Whether category labels are drawn.
        y_label: Optional y-axis label.
        y_format: Optional tick formatter for y values.
        on_click: Called with the positional index of a clicked point.
    """

    name: str
    columns: Sequence[Column]
    categories: Sequence[Any]
    show_x_axis: bool = True
    y_label: str | None = None
    y_format: Callable[[float], str] | None = None
    on_click: Callable[[int], None] | None = None


class ChartPresenter(Protocol):
    """Renders chart specs."""

    def render(self, chart: ChartSpec) -> None: ...


class MatplotlibPresenter:
    """Render charts as line plots with matplotlib and save them to disk.

    Gaps (`None`) and values that are not numbers break the line. Points
    are pickable; on interactive canvases a pick is forwarded to
    `ChartSpec.on_click`.
    """

    def __init__(self, out_dir: str | Path, *, fmt: str = "png", dpi: int = 100) -> None:
        self.out_dir = Path(out_dir)
        self.fmt = fmt
        self.dpi = dpi

    def path_for(self, chart: ChartSpec) -> Path:
        return self.out_dir / f"{chart.name}.{self.fmt}"

    def build_figure(self, chart: ChartSpec) -> Figure:
        fig = Figure(figsize=(12, 4))
        ax = fig.add_subplot()
        x = np.arange(len(chart.categories))
        for col in chart.columns:
            y = np.array([v if is_number(v) else np.nan for v in col[1:]], dtype=float)
            ax.plot(np.arange(len(y)), y, marker=".", label=str(col[0]), picker=5)

        ax.set_title(chart.name)
        if chart.show_x_axis:
            ax.set_xticks(x)
            ax.set_xticklabels([str(c) for c in chart.categories], rotation=90, fontsize=6)
        else:
            ax.get_xaxis().set_visible(False)
        if chart.y_label:
            ax.set_ylabel(chart.y_label)
        if chart.y_format is not None:
            fmt = chart.y_format
            ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _pos: fmt(v)))
        if chart.columns:
            ax.legend(loc="upper left", fontsize=6)

        if chart.on_click is not None:
            on_click = chart.on_click

            def _on_pick(event: PickEvent) -> None:
                ind = getattr(event, "ind", None)
                if ind is not None and len(ind) > 0:
                    on_click(int(ind[0]))

            fig.canvas.mpl_connect("pick_event", _on_pick)

        return fig

    def render(self, chart: ChartSpec) -> None:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        fig = self.build_figure(chart)
        path = self.path_for(chart)
        fig.savefig(path, dpi=self.dpi, bbox_inches="tight")
        logger.info("Rendered %s (%d series) to %s", chart.name, len(chart.columns), path)
