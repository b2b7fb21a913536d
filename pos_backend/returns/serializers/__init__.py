from .sale_return import (
    ReturnCreateSerializer,
    ReturnItemSerializer,
    ReturnLineInputSerializer,
    ReturnSerializer,
    ReturnStatusSerializer,
)

__all__ = [
    "ReturnSerializer",
    "ReturnItemSerializer",
    "ReturnCreateSerializer",
    "ReturnLineInputSerializer",
    "ReturnStatusSerializer",
]
