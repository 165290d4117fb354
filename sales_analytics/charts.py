"""
Chart specifications built from the analysis summaries, and their rendering.

Building a ``ChartSpec`` is a pure mapping from a summary frame; drawing is
left to ``render_chart``, which uses matplotlib's non-interactive backend and
writes PNG files.
"""

import math
import os
from dataclasses import dataclass
from typing import List

import matplotlib
import pandas as pd
import structlog

matplotlib.use("Agg")  # Use non-interactive backend
import matplotlib.pyplot as plt  # noqa: E402

from .analysis import AnalysisResult  # noqa: E402

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChartSpec:
    name: str
    kind: str  # "bar" or "line"
    title: str
    x_label: str
    y_label: str
    labels: List[str]
    values: List[float]
    color: str
    rotate_labels: int = 0
    markers: bool = False


def _values(summary: pd.DataFrame) -> List[float]:
    # Empty groups may carry NaN; charts never see it.
    return [
        0.0 if value is None or math.isnan(value) else float(value)
        for value in summary["total_sales"]
    ]


def _ordered(summary: pd.DataFrame, by: str, ascending: bool) -> pd.DataFrame:
    return summary.sort_values(by, ascending=ascending, kind="mergesort")


def category_chart(summary: pd.DataFrame) -> ChartSpec:
    ordered = _ordered(summary, "total_sales", ascending=False)
    return ChartSpec(
        name="sales_by_category",
        kind="bar",
        title="Total Revenue by Category",
        x_label="Category",
        y_label="Total Revenue",
        labels=[str(label) for label in ordered["category"]],
        values=_values(ordered),
        color="steelblue",
        rotate_labels=45,
    )


def region_chart(summary: pd.DataFrame) -> ChartSpec:
    ordered = _ordered(summary, "total_sales", ascending=False)
    return ChartSpec(
        name="sales_by_region",
        kind="bar",
        title="Sales Distribution by Region",
        x_label="Region",
        y_label="Total Sales",
        labels=[str(label) for label in ordered["region"]],
        values=_values(ordered),
        color="coral",
    )


def quarter_chart(summary: pd.DataFrame) -> ChartSpec:
    ordered = _ordered(summary, "quarter", ascending=True)
    return ChartSpec(
        name="sales_by_quarter",
        kind="line",
        title="Sales Trend by Quarter",
        x_label="Quarter",
        y_label="Total Sales",
        labels=[str(label) for label in ordered["quarter"]],
        values=_values(ordered),
        color="darkgreen",
        markers=True,
    )


def build_charts(result: AnalysisResult) -> List[ChartSpec]:
    return [
        category_chart(result.category_summary),
        region_chart(result.region_summary),
        quarter_chart(result.quarter_summary),
    ]


def render_chart(spec: ChartSpec, output_dir: str) -> str:
    """Draw a chart spec and save it as ``<output_dir>/<name>.png``."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, f"{spec.name}.png")

    fig, ax = plt.subplots(figsize=(8, 5))
    try:
        if spec.kind == "bar":
            ax.bar(spec.labels, spec.values, color=spec.color)
        elif spec.kind == "line":
            ax.plot(spec.labels, spec.values, color=spec.color, linewidth=1.5)
            if spec.markers:
                ax.scatter(spec.labels, spec.values, color=spec.color, s=36, zorder=3)
        else:
            raise ValueError(f"Unsupported chart kind: {spec.kind}")

        ax.set_title(spec.title)
        ax.set_xlabel(spec.x_label)
        ax.set_ylabel(spec.y_label)
        if spec.rotate_labels:
            plt.setp(ax.get_xticklabels(), rotation=spec.rotate_labels, ha="right")
        for side in ("top", "right"):
            ax.spines[side].set_visible(False)
        fig.tight_layout()
        fig.savefig(path)
    finally:
        plt.close(fig)

    logger.info("Chart rendered", chart=spec.name, path=path)
    return path


def render_charts(specs: List[ChartSpec], output_dir: str) -> List[str]:
    return [render_chart(spec, output_dir) for spec in specs]
