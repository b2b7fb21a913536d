from .stock_alerts import (
    AlertCatalogCache,
    AlertRecalcResult,
    StockAlertRecalculator,
    classify_stock,
    resolve_alert,
)

__all__ = [
    "AlertCatalogCache",
    "AlertRecalcResult",
    "StockAlertRecalculator",
    "classify_stock",
    "resolve_alert",
]
