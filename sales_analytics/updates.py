"""
Bulk price update followed by a dependent revenue recomputation.

The two phases are separate store operations and are NOT atomic as a whole:

1. ``apply_discount`` multiplies ``price`` for every document of a category
   in a single bulk update.
2. ``recompute_revenue`` re-reads the same documents and rewrites
   ``total_revenue = price * quantity_sold`` one document at a time.

If the process stops after phase 1, or partway through phase 2, the affected
documents keep their new price with a stale ``total_revenue``. Nothing rolls
phase 1 back. ``recompute_revenue`` can be re-run later to repair them, since
it only reads the current price and quantity.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict

import structlog

from .store import SalesStore

logger = structlog.get_logger(__name__)


@dataclass
class DiscountResult:
    category: str
    factor: float
    modified_count: int
    recomputed_count: int


def apply_discount(store: SalesStore, category: str, factor: float = 0.9) -> int:
    """Phase 1: multiply price by ``factor`` for every document in ``category``.

    Returns the number of modified documents. ``factor`` must be a positive
    finite number; no lower bound is enforced on the resulting prices.
    """
    if not math.isfinite(factor) or factor <= 0:
        raise ValueError(f"Discount factor must be positive, got {factor}")

    modified = store.update_many({"category": category}, {"$mul": {"price": factor}})
    logger.info("Price update applied", category=category, factor=factor, modified=modified)
    return modified


def recompute_revenue(store: SalesStore, query: Dict[str, Any]) -> int:
    """Phase 2: rewrite total_revenue for every document matching ``query``.

    Each document is updated on its own, keyed by ``_id``.
    """
    documents = store.find(query, projection={"price": 1, "quantity_sold": 1})
    for document in documents:
        store.update_one(
            {"_id": document["_id"]},
            {"$set": {"total_revenue": document["price"] * document["quantity_sold"]}},
        )
    logger.info("Total revenue recalculated", query=query, documents=len(documents))
    return len(documents)


def discount_and_recompute(
    store: SalesStore, category: str = "Electronics", factor: float = 0.9
) -> DiscountResult:
    """Apply the category discount, then restore the revenue invariant."""
    print(f"\nApplying {(1 - factor):.0%} discount to all {category} items...")
    modified = apply_discount(store, category, factor)
    print(f"Updated {modified} products")

    print("\nRecalculating total_revenue after price updates...")
    recomputed = recompute_revenue(store, {"category": category})
    print(f"Total revenue recalculated for {recomputed} products")

    return DiscountResult(
        category=category,
        factor=factor,
        modified_count=modified,
        recomputed_count=recomputed,
    )
