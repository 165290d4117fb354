"""Pytest configuration and fixtures."""

import os
import uuid
from datetime import date

import mongomock
import pymongo
import pymongo_inmemory
import pytest

from sales_analytics.config import SalesSettings
from sales_analytics.generator import generate_sample_records
from sales_analytics.models import SalesRecord
from sales_analytics.store import SalesStore


@pytest.fixture
def mongo_collection():
    """In-process collection implementing the pymongo API."""
    client = mongomock.MongoClient()
    return client["sales_analytics_test"]["product_sales"]


@pytest.fixture
def store(mongo_collection):
    return SalesStore(mongo_collection)


@pytest.fixture(scope="session")
def mongod_client():
    """Client on a real mongod, for operators mongomock does not implement ($mul).

    Uses SALES_TEST_MONGO_URL when set, otherwise starts a throwaway mongod
    through pymongo-inmemory.
    """
    url = os.environ.get("SALES_TEST_MONGO_URL")
    client = pymongo.MongoClient(url) if url else pymongo_inmemory.MongoClient()
    yield client
    client.close()


@pytest.fixture
def mongod_store(mongod_client):
    """Store bound to a fresh collection on the real mongod."""
    collection = mongod_client["sales_analytics_test"][f"product_sales_{uuid.uuid4().hex}"]
    yield SalesStore(collection)
    collection.drop()


@pytest.fixture
def scenario_records():
    """Three records: two Electronics, one Books."""
    return [
        SalesRecord(
            product_id="PROD1",
            product_name="Product 1",
            category="Electronics",
            price=100,
            quantity_sold=10,
            region="North",
            sale_date=date(2023, 1, 15),
        ),
        SalesRecord(
            product_id="PROD2",
            product_name="Product 2",
            category="Books",
            price=20,
            quantity_sold=5,
            region="South",
            sale_date=date(2023, 4, 10),
        ),
        SalesRecord(
            product_id="PROD3",
            product_name="Product 3",
            category="Electronics",
            price=50,
            quantity_sold=2,
            region="North",
            sale_date=date(2023, 1, 20),
        ),
    ]


@pytest.fixture
def scenario_documents(scenario_records):
    return [record.to_document() for record in scenario_records]


@pytest.fixture
def scenario_store(store, scenario_documents):
    """Store seeded with the three scenario records."""
    store.insert_many([dict(doc) for doc in scenario_documents])
    return store


@pytest.fixture
def sample_store(store):
    """Store seeded with 120 generated records."""
    store.insert_many(record.to_document() for record in generate_sample_records(n=120, seed=7))
    return store


@pytest.fixture
def test_settings(tmp_path):
    return SalesSettings(
        sample_size=60,
        random_seed=42,
        export_path=str(tmp_path / "sales_data_export.csv"),
        chart_dir=str(tmp_path / "charts"),
        render_charts=False,
    )
