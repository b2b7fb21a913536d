# returns/models/return_item.py

"""
RETURN ITEM

One returned line of a Return.

- refund_amount = sale_item.price * qty_returned, computed ONCE at return
  creation and never recomputed.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models

from products.models import Product
from sales.models import SaleItem

from .sale_return import Return


class ReturnItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale_return = models.ForeignKey(
        Return,
        on_delete=models.CASCADE,
        related_name="items",
    )

    line_no = models.PositiveSmallIntegerField(default=1)

    sale_item = models.ForeignKey(
        SaleItem,
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    qty_returned = models.PositiveIntegerField()

    refund_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["line_no"]
        indexes = [
            models.Index(fields=["sale_item"], name="returnitem_sale_item_idx"),
            models.Index(fields=["product"], name="returnitem_product_idx"),
        ]

    def save(self, *args, **kwargs):
        if int(self.qty_returned or 0) <= 0:
            raise ValueError("qty_returned must be greater than zero")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_id} x {self.qty_returned}"
