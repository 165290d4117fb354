"""
Data validation for the materialised sales frame, plus structured logging setup.

The pandera schema checks the shape of the documents read back from the
store; the revenue drift check reports records whose derived
``total_revenue`` no longer matches ``price * quantity_sold``.
"""

import logging
from typing import Any, Dict

import pandas as pd
import pandera as pa
import structlog
from pandera import Check, Column, DataFrameSchema
from pandera.errors import SchemaErrors

from .models import CATEGORIES, QUARTERS, REGIONS

logger = structlog.get_logger(__name__)


class SalesDataSchema:
    """Schema definitions for sales frame validation"""

    SALES_FRAME_SCHEMA = DataFrameSchema(
        {
            "product_id": Column(
                checks=[Check.str_length(min_value=1)],
                nullable=False,
                unique=True,
            ),
            "product_name": Column(nullable=False),
            "category": Column(checks=[Check.isin(list(CATEGORIES))], nullable=False),
            "region": Column(checks=[Check.isin(list(REGIONS))], nullable=False),
            "price": Column(
                pa.Float64,
                checks=[Check.greater_than_or_equal_to(0)],
                nullable=False,
                coerce=True,
            ),
            "quantity_sold": Column(
                pa.Int64,
                checks=[Check.greater_than_or_equal_to(1)],
                nullable=False,
                coerce=True,
            ),
            "total_revenue": Column(pa.Float64, nullable=False, coerce=True),
            "sale_date": Column(
                checks=[Check.str_matches(r"^\d{4}-\d{2}-\d{2}$")], nullable=False
            ),
            "month": Column(
                checks=[Check.isin([f"{m:02d}" for m in range(1, 13)])],
                nullable=False,
            ),
            "quarter": Column(checks=[Check.isin(list(QUARTERS))], nullable=False),
            "year": Column(checks=[Check.str_matches(r"^\d{4}$")], nullable=False),
        },
        strict=False,
    )


def validate_sales_frame(df: pd.DataFrame, raise_on_error: bool = True) -> Dict[str, Any]:
    """Validate a sales frame against the pandera schema.

    Returns a result dict with ``passed`` and ``errors``. With
    ``raise_on_error`` the pandera ``SchemaErrors`` is re-raised after logging.
    """
    validation_result = {"passed": False, "errors": []}

    try:
        SalesDataSchema.SALES_FRAME_SCHEMA.validate(df, lazy=True)
        validation_result["passed"] = True
        logger.info("Sales frame validation passed", rows=len(df))

    except SchemaErrors as e:
        validation_result["errors"] = [str(error) for error in e.schema_errors]
        logger.error(
            "Sales frame validation failed", errors=validation_result["errors"]
        )
        if raise_on_error:
            raise

    return validation_result


def find_revenue_drift(df: pd.DataFrame, tolerance: float = 1e-6) -> pd.DataFrame:
    """Return the rows whose total_revenue differs from price * quantity_sold."""
    if df.empty:
        return df.copy()
    expected = df["price"].astype(float) * df["quantity_sold"].astype(float)
    drift = (df["total_revenue"].astype(float) - expected).abs()
    # Relative tolerance for large revenues, absolute near zero.
    limit = tolerance * expected.abs().clip(lower=1.0)
    return df.loc[drift > limit].copy()


def calculate_data_quality_metrics(df: pd.DataFrame) -> Dict[str, Any]:
    """Calculate basic data quality metrics for a sales frame"""
    metrics: Dict[str, Any] = {}

    metrics["total_rows"] = len(df)
    metrics["total_columns"] = len(df.columns)

    total_nulls = int(df.isnull().sum().sum())
    total_values = len(df) * len(df.columns)
    metrics["overall_null_ratio"] = total_nulls / total_values if total_values > 0 else 0

    if "product_id" in df.columns:
        metrics["duplicate_product_ids"] = int(df["product_id"].duplicated().sum())

    if {"price", "quantity_sold", "total_revenue"}.issubset(df.columns):
        metrics["revenue_drift_count"] = len(find_revenue_drift(df))

    return metrics


def setup_logging(log_level: str = "INFO", log_format: str = "json"):
    """Setup structured logging with structlog"""
    logging.basicConfig(format="%(message)s", level=log_level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
