"""
Data models for the sales analytics pipeline.
"""

from .sales_record import (
    CATEGORIES,
    QUARTERS,
    REGIONS,
    SALES_RECORD_FIELDS,
    SalesRecord,
    quarter_of,
)

__all__ = [
    "SalesRecord",
    "CATEGORIES",
    "REGIONS",
    "QUARTERS",
    "SALES_RECORD_FIELDS",
    "quarter_of",
]
