"""
Aggregation engine for sales records.

All functions here are pure: they take a materialised sales frame and return
new summary frames. Summaries are recomputed on every pass and never written
back to the store.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import pandas as pd

from .models import SALES_RECORD_FIELDS

_FRAME_DTYPES = {"price": "float64", "quantity_sold": "int64", "total_revenue": "float64"}

# Output column -> (source column, pandas aggregation)
Aggregations = Dict[str, Tuple[str, str]]

CATEGORY_AGGREGATIONS: Aggregations = {
    "total_sales": ("total_revenue", "sum"),
    "avg_price": ("price", "mean"),
    "total_quantity": ("quantity_sold", "sum"),
    "count": ("product_id", "count"),
}

REGION_AGGREGATIONS: Aggregations = {
    "total_sales": ("total_revenue", "sum"),
    "avg_quantity": ("quantity_sold", "mean"),
    "count": ("product_id", "count"),
}

QUARTER_AGGREGATIONS: Aggregations = REGION_AGGREGATIONS


@dataclass
class AnalysisResult:
    """Global scalars and ordered group summaries from one analysis pass."""

    record_count: int
    total_revenue: float
    avg_price: float
    avg_quantity: float
    category_summary: pd.DataFrame
    region_summary: pd.DataFrame
    quarter_summary: pd.DataFrame
    frame: pd.DataFrame = field(repr=False, default_factory=pd.DataFrame)


def records_frame(documents: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    """Materialise store documents into a frame with the sales columns.

    The store-assigned ``_id`` is dropped. Unknown extra fields are kept after
    the known ones.
    """
    df = pd.DataFrame(list(documents))
    if df.empty:
        return pd.DataFrame(
            {
                col: pd.Series(dtype=_FRAME_DTYPES.get(col, object))
                for col in SALES_RECORD_FIELDS
            }
        )

    if "_id" in df.columns:
        df = df.drop(columns="_id")
    for col in SALES_RECORD_FIELDS:
        if col not in df.columns:
            df[col] = pd.Series(dtype=_FRAME_DTYPES.get(col, object))
    extras = [col for col in df.columns if col not in SALES_RECORD_FIELDS]
    return df[list(SALES_RECORD_FIELDS) + extras]


def global_summary(df: pd.DataFrame) -> Dict[str, Any]:
    """Record count, revenue sum and the mean price and quantity."""
    return {
        "record_count": len(df),
        "total_revenue": float(df["total_revenue"].sum()),
        "avg_price": float(df["price"].mean()) if len(df) else float("nan"),
        "avg_quantity": float(df["quantity_sold"].mean()) if len(df) else float("nan"),
    }


def _summarise(
    df: pd.DataFrame,
    keys: Sequence[str],
    aggregations: Aggregations,
    sort_by: str,
    ascending: bool,
    labels: Optional[Sequence[Any]] = None,
) -> pd.DataFrame:
    summary = df.groupby(list(keys)).agg(**aggregations)

    if labels is not None:
        # Zero-member groups: sums and counts are 0, means stay NaN.
        dtypes = summary.dtypes
        extra = [label for label in summary.index if label not in labels]
        summary = summary.reindex(pd.Index(list(labels) + extra, name=keys[0]))
        for name, (_, func) in aggregations.items():
            if func in ("sum", "count"):
                summary[name] = summary[name].fillna(0).astype(dtypes[name])

    return (
        summary.reset_index()
        .sort_values(sort_by, ascending=ascending, kind="mergesort")
        .reset_index(drop=True)
    )


def category_summary(
    df: pd.DataFrame, categories: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """Revenue, mean price and units per category, highest revenue first."""
    return _summarise(
        df, ["category"], CATEGORY_AGGREGATIONS, "total_sales", False, categories
    )


def region_summary(
    df: pd.DataFrame, regions: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """Revenue and mean units per region, highest revenue first."""
    return _summarise(df, ["region"], REGION_AGGREGATIONS, "total_sales", False, regions)


def quarter_summary(
    df: pd.DataFrame, quarters: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """Revenue and mean units per quarter, ordered Q1..Q4."""
    return _summarise(df, ["quarter"], QUARTER_AGGREGATIONS, "quarter", True, quarters)


def category_region_summary(df: pd.DataFrame, limit: Optional[int] = None) -> pd.DataFrame:
    summary = _summarise(
        df, ["category", "region"], REGION_AGGREGATIONS, "total_sales", False
    )
    return summary.head(limit) if limit else summary


def analyze(
    df: pd.DataFrame,
    categories: Optional[Sequence[str]] = None,
    regions: Optional[Sequence[str]] = None,
    quarters: Optional[Sequence[str]] = None,
) -> AnalysisResult:
    """Compute the global scalars and the three ordered group summaries."""
    scalars = global_summary(df)
    return AnalysisResult(
        record_count=scalars["record_count"],
        total_revenue=scalars["total_revenue"],
        avg_price=scalars["avg_price"],
        avg_quantity=scalars["avg_quantity"],
        category_summary=category_summary(df, categories),
        region_summary=region_summary(df, regions),
        quarter_summary=quarter_summary(df, quarters),
        frame=df,
    )


def print_analysis(result: AnalysisResult) -> None:
    """Print the analysis tables to the console."""
    print("\n=== Sales Data Analysis ===")
    print(f"Total number of records: {result.record_count}")
    print(f"Total revenue: {result.total_revenue:,.2f}")
    print(f"Average price: {result.avg_price:,.2f}")
    print(f"Average quantity sold: {result.avg_quantity:,.2f}")

    print("\n=== Sales by Category ===")
    print(result.category_summary.to_string(index=False))
    print("\n=== Sales by Region ===")
    print(result.region_summary.to_string(index=False))
    print("\n=== Sales by Quarter ===")
    print(result.quarter_summary.to_string(index=False))
