from .sale import SaleCreateSerializer, SaleSerializer, SaleStatusSerializer
from .sale_item import SaleItemSerializer, SaleLineInputSerializer

__all__ = [
    "SaleSerializer",
    "SaleCreateSerializer",
    "SaleStatusSerializer",
    "SaleItemSerializer",
    "SaleLineInputSerializer",
]
