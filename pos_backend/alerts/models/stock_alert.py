# alerts/models/stock_alert.py

"""
STOCK ALERT (DERIVED DATA)

Signals that a product's stock has fallen below its min_stock.

Rules:
- At any time an open alert must reflect the product's current stock vs.
  min_stock; StockAlertRecalculator keeps this true after every stock
  mutation.
- At most one alert per product is refreshed in place (the most recent open
  one); new rows are only inserted when the product has no open alert.
- Alerts are polled by the alerts UI, never pushed.
"""

import uuid

from django.db import models
from django.utils import timezone

from products.models import Product

from .catalog import AlertPriority, AlertState, AlertType


class StockAlert(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_alerts",
    )

    type = models.ForeignKey(AlertType, on_delete=models.PROTECT, related_name="+")
    priority = models.ForeignKey(AlertPriority, on_delete=models.PROTECT, related_name="+")
    state = models.ForeignKey(AlertState, on_delete=models.PROTECT, related_name="+")

    title = models.CharField(max_length=150)
    message = models.TextField(blank=True, default="")

    current_stock = models.IntegerField(null=True, blank=True)
    min_stock = models.IntegerField(null=True, blank=True)

    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    resolved = models.BooleanField(default=False)

    class Meta:
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["product", "resolved"], name="stockalert_product_open_idx"),
            models.Index(fields=["state", "resolved"], name="stockalert_state_open_idx"),
        ]

    def __str__(self):
        return f"{self.title} | {self.product_id} | {self.current_stock}/{self.min_stock}"
