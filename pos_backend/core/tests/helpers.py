# core/tests/helpers.py

"""
Shared builders for lifecycle tests.
"""

from __future__ import annotations

from decimal import Decimal

from alerts.services.stock_alerts import AlertCatalogCache, StockAlertRecalculator
from core.admission import AdmissionController
from core.engine import LifecycleEngine
from core.unit_of_work import UnitOfWork
from products.models import Product
from sales.models import Sale, SaleItem, SaleStatus


def build_engine(*, max_concurrent: int = 5, cache: AlertCatalogCache | None = None) -> LifecycleEngine:
    return LifecycleEngine(
        admission=AdmissionController(max_concurrent=max_concurrent, timeout=5.0),
        unit_of_work=UnitOfWork(),
        recalculator=StockAlertRecalculator(cache or AlertCatalogCache(ttl=60)),
    )


def make_product(sku: str, *, name: str | None = None, price="10.00", stock: int = 50, min_stock: int = 5) -> Product:
    return Product.objects.create(
        sku=sku,
        name=name or sku,
        price=Decimal(price),
        stock=stock,
        min_stock=min_stock,
    )


def make_sale(lines, *, status=SaleStatus.PENDING) -> Sale:
    """
    lines: [(product, qty, unit_price), ...]
    Builds the rows directly (no stock effect) so tests control the status.
    """
    subtotal = sum((Decimal(price) * qty for _, qty, price in lines), Decimal("0.00"))
    sale = Sale.objects.create(
        status=status,
        items_count=sum(qty for _, qty, _ in lines),
        subtotal=subtotal,
        total=subtotal,
    )
    for n, (product, qty, price) in enumerate(lines, start=1):
        SaleItem.objects.create(
            sale=sale,
            line_no=n,
            product=product,
            qty=qty,
            price=Decimal(price),
        )
    return sale
