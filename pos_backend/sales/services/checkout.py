# sales/services/checkout.py

"""
======================================================
PATH: sales/services/checkout.py
======================================================
SALE CREATION (CHECKOUT)

Purpose:
- Persist a Sale + its SaleItems with authoritative totals.
- Sales are ALWAYS created as PENDING here; stock is never touched at
  creation. If the caller wants the sale to start in another status, the
  engine routes it through the sale lifecycle manager in the same
  transaction so the stock decrement happens exactly once.

Totals:
- subtotal = sum(price * qty)
- total    = subtotal - discount_total   (discount comes from the promotion
                                          calculator, computed by the caller)
- adjusted_total starts equal to total
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError

from core.exceptions import InvalidPrecondition, NotFound
from products.models import Product
from sales.models import Sale, SaleItem, SaleStatus

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(value, *, field_name="amount") -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidPrecondition(f"{field_name} must be a valid decimal")
    return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _load_products(product_ids) -> dict[str, Product]:
    try:
        products = {str(p.id): p for p in Product.objects.filter(pk__in=list(product_ids))}
    except ValidationError:
        raise NotFound("One or more products were not found")

    missing = [pid for pid in product_ids if str(pid) not in products]
    if missing:
        raise NotFound(f"Product {missing[0]} not found")
    return products


def create_sale(
    *,
    items: list[dict],
    user=None,
    customer: str = "",
    customer_tax_id: str = "",
    is_final_consumer: bool = True,
    payment_method: str = "cash",
    discount_total=Decimal("0.00"),
    sold_at=None,
) -> Sale:
    """
    items: [{product_id, qty, price?}, ...]
      price defaults to the product's current price.
    """
    if not items:
        raise InvalidPrecondition("A sale requires at least one item.")

    products = _load_products({str(line["product_id"]) for line in items})

    lines = []
    subtotal = Decimal("0.00")
    qty_total = 0
    for line in items:
        qty = int(line.get("qty") or 0)
        if qty <= 0:
            raise InvalidPrecondition("Item quantity must be an integer >= 1.")

        product = products[str(line["product_id"])]
        price = line.get("price")
        price = _money(product.price if price in (None, "") else price, field_name="price")
        if price < 0:
            raise InvalidPrecondition("Item price cannot be negative.")

        lines.append((product, qty, price))
        subtotal += price * qty
        qty_total += qty

    subtotal = subtotal.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    discount = _money(discount_total or 0, field_name="discount_total")
    if discount < 0 or discount > subtotal:
        raise InvalidPrecondition(
            f"discount_total must be between 0 and the subtotal ({subtotal})."
        )

    total = subtotal - discount

    extra = {}
    if sold_at is not None:
        extra["sold_at"] = sold_at

    sale = Sale.objects.create(
        created_by=user if getattr(user, "is_authenticated", False) else None,
        customer=(customer or "").strip(),
        customer_tax_id=(customer_tax_id or "").strip(),
        is_final_consumer=bool(is_final_consumer),
        payment_method=(payment_method or "cash").strip().lower(),
        status=SaleStatus.PENDING,
        items_count=qty_total,
        subtotal=subtotal,
        discount_total=discount,
        total=total,
        total_returned=Decimal("0.00"),
        adjusted_total=total,
        **extra,
    )

    SaleItem.objects.bulk_create(
        [
            SaleItem(sale=sale, line_no=n, product=product, qty=qty, price=price)
            for n, (product, qty, price) in enumerate(lines, start=1)
        ]
    )

    logger.info(
        "Sale created",
        extra={
            "sale_id": str(sale.id),
            "items": qty_total,
            "products": len(products),
            "total": str(total),
        },
    )

    return sale
