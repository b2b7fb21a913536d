from .checkout import create_sale
from .sale_lifecycle import (
    SaleLifecycleManager,
    SaleTransitionResult,
    parse_sale_status,
)

__all__ = [
    "create_sale",
    "SaleLifecycleManager",
    "SaleTransitionResult",
    "parse_sale_status",
]
