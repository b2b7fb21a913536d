from .inventory import (
    StockLevel,
    apply_stock_deltas,
    decrement_stock,
    group_quantities,
    increment_stock,
)

__all__ = [
    "StockLevel",
    "apply_stock_deltas",
    "decrement_stock",
    "group_quantities",
    "increment_stock",
]
