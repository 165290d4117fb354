"""
Representative queries against the sales collection.

Each function takes the store handle, issues one find or aggregation and
returns the materialised documents. Nothing here mutates documents; the index
helper is the only schema-level side effect. Store errors propagate.
"""

from typing import Any, Dict, List

import pandas as pd
import structlog

from .store import SalesStore

logger = structlog.get_logger(__name__)

COUNT_BY_CATEGORY_PIPELINE = [
    {"$group": {"_id": "$category", "count": {"$sum": 1}}},
    {"$sort": {"count": -1}},
]

AVG_PRICE_BY_REGION_PIPELINE = [
    {"$group": {"_id": "$region", "avg_price": {"$avg": "$price"}}},
    {"$sort": {"avg_price": -1}},
]

REVENUE_BY_MONTH_PIPELINE = [
    {"$group": {"_id": "$month", "total_revenue": {"$sum": "$total_revenue"}}},
    {"$sort": {"_id": 1}},
]

CATEGORY_REGION_INDEX = ("category", "region")


def top_products_by_revenue(store: SalesStore, limit: int = 5) -> List[Dict[str, Any]]:
    return store.find(
        {},
        projection={"product_name": 1, "total_revenue": 1, "_id": 0},
        sort=[("total_revenue", -1)],
        limit=limit,
    )


def count_by_category(store: SalesStore) -> List[Dict[str, Any]]:
    return store.aggregate(COUNT_BY_CATEGORY_PIPELINE)


def avg_price_by_region(store: SalesStore) -> List[Dict[str, Any]]:
    return store.aggregate(AVG_PRICE_BY_REGION_PIPELINE)


def revenue_by_month(store: SalesStore) -> List[Dict[str, Any]]:
    return store.aggregate(REVENUE_BY_MONTH_PIPELINE)


def ensure_category_region_index(store: SalesStore) -> str:
    """Create the (category, region) compound index if it does not exist."""
    return store.create_index(CATEGORY_REGION_INDEX)


def list_indexes(store: SalesStore) -> Dict[str, Any]:
    return store.index_information()


def category_region_matrix(store: SalesStore, limit: int = 10) -> List[Dict[str, Any]]:
    """Top category x region combinations by revenue."""
    pipeline = [
        {
            "$group": {
                "_id": {"category": "$category", "region": "$region"},
                "total_sales": {"$sum": "$total_revenue"},
                "avg_quantity": {"$avg": "$quantity_sold"},
            }
        },
        {"$sort": {"total_sales": -1}},
        {"$limit": limit},
    ]
    return store.aggregate(pipeline)


def high_value_items(
    store: SalesStore, category: str = "Electronics", min_price: float = 300
) -> List[Dict[str, Any]]:
    """Items of ``category`` priced strictly above ``min_price``."""
    return store.find(
        {"category": category, "price": {"$gt": min_price}},
        projection={"product_name": 1, "price": 1, "_id": 0},
    )


def _print_table(title: str, rows: List[Dict[str, Any]]) -> None:
    print(f"\n{title}:")
    if not rows:
        print("(no results)")
        return
    print(pd.json_normalize(rows).to_string(index=False))


def run_query_examples(store: SalesStore, top_limit: int = 5) -> Dict[str, List[Dict[str, Any]]]:
    """Run the basic query catalogue and print each result."""
    print("\n=== MongoDB Query Examples ===")
    results = {
        "top_products": top_products_by_revenue(store, limit=top_limit),
        "count_by_category": count_by_category(store),
        "avg_price_by_region": avg_price_by_region(store),
        "revenue_by_month": revenue_by_month(store),
    }
    _print_table(f"Top {top_limit} products by revenue", results["top_products"])
    _print_table("Product count by category", results["count_by_category"])
    _print_table("Average price by region", results["avg_price_by_region"])
    _print_table("Total revenue by month", results["revenue_by_month"])

    logger.info(
        "Query examples completed",
        result_sizes={name: len(rows) for name, rows in results.items()},
    )
    return results


def run_advanced_features(
    store: SalesStore,
    matrix_limit: int = 10,
    category: str = "Electronics",
    min_price: float = 300,
) -> Dict[str, Any]:
    """Ensure the compound index, then run the matrix and filter queries."""
    print("\n=== Advanced MongoDB Features ===")
    print("\nCreating index on category and region fields...")
    index_name = ensure_category_region_index(store)
    indexes = list_indexes(store)
    print("\nIndexes in the collection:")
    for name, info in indexes.items():
        print(f"  {name}: {info.get('key')}")

    matrix = category_region_matrix(store, limit=matrix_limit)
    _print_table("Sales performance matrix (category by region)", matrix)

    high_value = high_value_items(store, category=category, min_price=min_price)
    _print_table(
        f"High-value items (price > {min_price:g}) in {category} category", high_value
    )

    logger.info(
        "Advanced features completed",
        index=index_name,
        matrix_rows=len(matrix),
        high_value_items=len(high_value),
    )
    return {
        "index_name": index_name,
        "indexes": indexes,
        "category_region_matrix": matrix,
        "high_value_items": high_value,
    }
