"""
Pydantic model for the sales record data contract.

This module defines the document stored in the sales collection, including
validation rules, field constraints and the derived fields that are computed
from the settable ones.
"""

from datetime import date
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, computed_field, field_validator

CATEGORIES = ("Electronics", "Clothing", "Home", "Sports", "Books")
REGIONS = ("North", "South", "East", "West", "Central")
QUARTERS = ("Q1", "Q2", "Q3", "Q4")

# Column order of a persisted document, also used for the CSV export header.
SALES_RECORD_FIELDS = (
    "product_id",
    "product_name",
    "category",
    "price",
    "quantity_sold",
    "region",
    "sale_date",
    "total_revenue",
    "month",
    "quarter",
    "year",
)


def quarter_of(month: int) -> str:
    """Return the quarter label ("Q1".."Q4") for a 1-based month number."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return f"Q{(month - 1) // 3 + 1}"


class SalesRecord(BaseModel):
    """
    Data contract for a single product sale document.

    ``total_revenue``, ``month``, ``quarter`` and ``year`` are computed fields:
    they are emitted by ``model_dump`` but can not be passed in or assigned.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        frozen=False,
        extra="forbid",
    )

    product_id: str
    product_name: str
    category: str
    price: float
    quantity_sold: int
    region: str
    sale_date: date

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        """Validate that the category is one of the known labels."""
        if v not in CATEGORIES:
            raise ValueError(f"Unknown category: {v}")
        return v

    @field_validator("region")
    @classmethod
    def validate_region(cls, v):
        """Validate that the region is one of the known labels."""
        if v not in REGIONS:
            raise ValueError(f"Unknown region: {v}")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        """Validate that price is non-negative and keep two decimals."""
        if v < 0:
            raise ValueError("Price cannot be negative")
        return round(v, 2)

    @field_validator("quantity_sold")
    @classmethod
    def validate_quantity_sold(cls, v):
        if v < 1:
            raise ValueError("Quantity sold must be at least 1")
        return v

    @computed_field
    @property
    def total_revenue(self) -> float:
        return self.price * self.quantity_sold

    @computed_field
    @property
    def month(self) -> str:
        return f"{self.sale_date.month:02d}"

    @computed_field
    @property
    def quarter(self) -> str:
        return quarter_of(self.sale_date.month)

    @computed_field
    @property
    def year(self) -> str:
        return f"{self.sale_date.year:04d}"

    def to_document(self) -> Dict[str, Any]:
        """Flat JSON-like document as inserted into the store."""
        data = self.model_dump(mode="json")
        return {field: data[field] for field in SALES_RECORD_FIELDS}

