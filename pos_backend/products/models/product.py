# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - `stock` is the single authoritative quantity-on-hand counter.
    - It is mutated ONLY by the sale/return lifecycle managers, through
      products.services.inventory.apply_stock_deltas (F-expression updates).
    - Catalog edits must never write `stock` directly.

    `min_stock` is the alert threshold: stock below it raises a stock alert.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=150, db_index=True)
    barcode = models.CharField(max_length=100, blank=True, null=True)

    # Current selling price (sale lines snapshot their own price)
    price = models.DecimalField(max_digits=12, decimal_places=2)

    stock = models.IntegerField(
        default=0,
        help_text="Quantity on hand (lifecycle-managed only).",
    )
    min_stock = models.PositiveIntegerField(
        default=0,
        help_text="Stock alert threshold.",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["sku"], name="product_sku_idx"),
            models.Index(fields=["name"], name="product_name_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.price is None or Decimal(self.price) <= 0:
            raise ValidationError("Price must be greater than zero")

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock) < int(self.min_stock or 0)
