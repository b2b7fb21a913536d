# returns/models/__init__.py

from .return_item import ReturnItem
from .sale_return import (
    TERMINAL_RETURN_STATUSES,
    Return,
    ReturnStatus,
    StockRestoration,
)

__all__ = [
    "Return",
    "ReturnItem",
    "ReturnStatus",
    "StockRestoration",
    "TERMINAL_RETURN_STATUSES",
]
