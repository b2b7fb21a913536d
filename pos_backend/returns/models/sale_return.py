# returns/models/sale_return.py

"""
======================================================
PATH: returns/models/sale_return.py
======================================================
RETURN (REVERSAL OF A COMPLETED SALE'S ITEMS)

Lifecycle:
    pending -> approved -> completed
    pending -> completed
    pending -> rejected
    (approved -> rejected is also accepted; completed/rejected are terminal)

Design guarantees:
- total_refund / items_count are fixed at creation.
- Terminal returns (completed, rejected) are immutable (enforced here AND in
  the lifecycle manager).
- stock_restoration records whether the physical stock for this return has
  already been put back (at most once per return).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from sales.models import Sale

User = settings.AUTH_USER_MODEL


class ReturnStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    COMPLETED = "completed", "Completed"


class StockRestoration(models.TextChoices):
    NONE = "none", "None"
    STOCK_RESTORED = "stock_restored", "Stock restored"


TERMINAL_RETURN_STATUSES = frozenset({ReturnStatus.COMPLETED, ReturnStatus.REJECTED})


class Return(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        related_name="returns",
    )

    status = models.CharField(
        max_length=32,
        choices=ReturnStatus.choices,
        default=ReturnStatus.PENDING,
    )

    stock_restoration = models.CharField(
        max_length=32,
        choices=StockRestoration.choices,
        default=StockRestoration.NONE,
    )

    reason = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    total_refund = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    items_count = models.PositiveIntegerField(default=0)

    return_date = models.DateTimeField(default=timezone.now)
    processed_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_returns",
    )

    class Meta:
        ordering = ["-return_date"]
        indexes = [
            models.Index(fields=["sale"], name="return_sale_idx"),
            models.Index(fields=["status"], name="return_status_idx"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_RETURN_STATUSES

    @property
    def stock_already_restored(self) -> bool:
        return self.stock_restoration == StockRestoration.STOCK_RESTORED

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Return.objects.filter(pk=self.pk).only("status").first()
            if previous is not None and previous.is_terminal:
                raise ValueError(
                    f"Return is immutable once {previous.status}."
                )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("Return records cannot be deleted")

    def __str__(self):
        return f"Return {self.id} | sale={self.sale_id} | {self.status}"
