"""
Synthetic sales data generator.

Produces a flat dataset of ``SalesRecord`` documents used to seed an empty
collection. Whether seeding happens at all is decided by the caller.
"""

from datetime import date, timedelta
from typing import List, Sequence

import numpy as np
import structlog

from .models import CATEGORIES, REGIONS, SalesRecord
from .store import SalesStore

logger = structlog.get_logger(__name__)

EPOCH_DATE = date(2023, 1, 1)
DATE_WINDOW_DAYS = 365
PRICE_RANGE = (10.0, 500.0)
QUANTITY_RANGE = (1, 100)


def generate_sample_records(
    n: int = 500,
    seed: int = 123,
    categories: Sequence[str] = CATEGORIES,
    regions: Sequence[str] = REGIONS,
    start_date: date = EPOCH_DATE,
) -> List[SalesRecord]:
    """Generate ``n`` sales records with uniformly sampled attributes.

    Product ids are sequential (PROD1..PRODn). Sale dates fall between
    ``start_date`` and ``start_date + 365 days``, both ends included.
    """
    if n < 1:
        raise ValueError("Number of records must be positive")

    rng = np.random.default_rng(seed)
    sampled_categories = rng.choice(list(categories), size=n)
    sampled_regions = rng.choice(list(regions), size=n)
    prices = np.round(rng.uniform(PRICE_RANGE[0], PRICE_RANGE[1], size=n), 2)
    quantities = rng.integers(QUANTITY_RANGE[0], QUANTITY_RANGE[1] + 1, size=n)
    day_offsets = rng.integers(0, DATE_WINDOW_DAYS + 1, size=n)

    records = []
    for i in range(n):
        records.append(
            SalesRecord(
                product_id=f"PROD{i + 1}",
                product_name=f"Product {i + 1}",
                category=str(sampled_categories[i]),
                price=float(prices[i]),
                quantity_sold=int(quantities[i]),
                region=str(sampled_regions[i]),
                sale_date=start_date + timedelta(days=int(day_offsets[i])),
            )
        )
    return records


def seed_sample_data(store: SalesStore, n: int = 500, seed: int = 123) -> int:
    """Generate ``n`` records and bulk-insert them, returning the insert count."""
    logger.info("Generating sample sales data", records=n, seed=seed)
    records = generate_sample_records(n=n, seed=seed)
    inserted = store.insert_many(record.to_document() for record in records)
    logger.info("Sample data inserted", inserted=inserted, collection=store.name)
    return inserted
