# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
STOCK LEDGER SERVICE

Purpose:
- The ONLY code path that mutates Product.stock.
- Grouped/batched updates: one UPDATE per distinct product, never per line.

Rules:
- Quantities are integer units.
- Deltas are applied with F() expressions so concurrent writers never
  overwrite each other's arithmetic (row locks come from the UPDATE itself).
- Products are updated in a stable (sorted id) order to keep lock ordering
  deterministic between concurrent transactions.
- Must run inside a transaction (UnitOfWork); callers own the boundary.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping

from django.db import transaction
from django.db.models import F

from core.exceptions import NotFound
from products.models import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockLevel:
    """Post-mutation stock snapshot fed to the stock alert recalculator."""

    product_id: object
    stock: int
    min_stock: int
    name: str = ""


def group_quantities(lines: Iterable[tuple[object, int]]) -> dict[object, int]:
    """
    Sum (product_id, qty) pairs per product.

    Lines without a product (deleted catalog rows) are skipped.
    """
    grouped: dict[object, int] = defaultdict(int)
    for product_id, qty in lines:
        if product_id is None:
            continue
        grouped[product_id] += int(qty or 0)
    return {pid: qty for pid, qty in grouped.items() if qty}


def apply_stock_deltas(
    deltas: Mapping[object, int],
    *,
    using: str | None = None,
) -> list[StockLevel]:
    """
    Apply signed per-product deltas and return the resulting stock levels.

    deltas:
      {product_id: +N}  -> increment (restoration)
      {product_id: -N}  -> decrement (sale completion)
    """
    if not deltas:
        return []

    conn = transaction.get_connection(using)
    if not conn.in_atomic_block:
        raise RuntimeError("apply_stock_deltas must run inside a transaction")

    manager = Product.objects.db_manager(using) if using else Product.objects

    for product_id in sorted(deltas, key=str):
        delta = int(deltas[product_id])
        if delta == 0:
            continue

        updated = manager.filter(pk=product_id).update(stock=F("stock") + delta)
        if updated != 1:
            raise NotFound(f"Product {product_id} not found")

        logger.info(
            "Stock adjusted",
            extra={"product_id": str(product_id), "delta": delta},
        )

    rows = manager.filter(pk__in=list(deltas.keys())).values(
        "id", "name", "stock", "min_stock"
    )

    return [
        StockLevel(
            product_id=row["id"],
            stock=int(row["stock"]),
            min_stock=int(row["min_stock"] or 0),
            name=row["name"],
        )
        for row in rows
    ]


def decrement_stock(quantities: Mapping[object, int], *, using: str | None = None) -> list[StockLevel]:
    return apply_stock_deltas({pid: -int(q) for pid, q in quantities.items()}, using=using)


def increment_stock(quantities: Mapping[object, int], *, using: str | None = None) -> list[StockLevel]:
    return apply_stock_deltas({pid: int(q) for pid, q in quantities.items()}, using=using)
