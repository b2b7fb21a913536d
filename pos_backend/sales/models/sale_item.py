# sales/models/sale_item.py

"""
SALE ITEM

One sold line.

Notes:
- `price` is the unit price frozen at sale time (independent of later
  catalog price changes).
- `qty` starts as the quantity sold and is reduced ONLY when a return
  referencing this line reaches COMPLETED (see returns lifecycle).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone

from products.models import Product

from .sale import Sale


class SaleItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="sale_items",
    )

    line_no = models.PositiveSmallIntegerField(default=1)

    qty = models.PositiveIntegerField()

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["line_no", "created_at"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="saleitem_sale_created_idx"),
            models.Index(fields=["product", "created_at"], name="saleitem_product_created_idx"),
        ]

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.price) * Decimal(int(self.qty or 0))

    def __str__(self):
        return f"{self.product} x {self.qty}"
