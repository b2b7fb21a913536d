from .catalog import AlertPriority, AlertState, AlertType
from .stock_alert import StockAlert

__all__ = [
    "AlertType",
    "AlertPriority",
    "AlertState",
    "StockAlert",
]
