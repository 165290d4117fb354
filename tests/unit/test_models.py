"""Tests for the sales record data contract."""

from datetime import date

import pytest
from pydantic import ValidationError

from sales_analytics.models import SALES_RECORD_FIELDS, SalesRecord, quarter_of


def make_record(**overrides):
    data = {
        "product_id": "PROD1",
        "product_name": "Product 1",
        "category": "Electronics",
        "price": 120.5,
        "quantity_sold": 3,
        "region": "West",
        "sale_date": date(2023, 8, 31),
    }
    data.update(overrides)
    return SalesRecord(**data)


def test_derived_fields():
    record = make_record()
    assert record.total_revenue == pytest.approx(361.5)
    assert record.month == "08"
    assert record.quarter == "Q3"
    assert record.year == "2023"


@pytest.mark.parametrize(
    "month,expected",
    [(1, "Q1"), (3, "Q1"), (4, "Q2"), (6, "Q2"), (7, "Q3"), (9, "Q3"), (10, "Q4"), (12, "Q4")],
)
def test_quarter_of(month, expected):
    assert quarter_of(month) == expected


def test_quarter_of_rejects_invalid_month():
    with pytest.raises(ValueError):
        quarter_of(13)


def test_price_rounded_to_two_decimals():
    assert make_record(price=19.999).price == 20.0
    assert make_record(price=10.123).price == 10.12


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        make_record(category="Toys")
    with pytest.raises(ValidationError):
        make_record(region="Atlantis")
    with pytest.raises(ValidationError):
        make_record(price=-1)
    with pytest.raises(ValidationError):
        make_record(quantity_sold=0)


def test_derived_fields_not_settable():
    with pytest.raises(ValidationError):
        make_record(total_revenue=1.0)
    with pytest.raises(ValidationError):
        make_record(quarter="Q1")


def test_revenue_follows_price_assignment():
    record = make_record(price=10, quantity_sold=4)
    record.price = 12.5
    assert record.total_revenue == pytest.approx(50.0)


def test_to_document_shape():
    document = make_record().to_document()
    assert tuple(document) == SALES_RECORD_FIELDS
    assert document["sale_date"] == "2023-08-31"
    assert document["total_revenue"] == pytest.approx(361.5)
