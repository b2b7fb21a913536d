# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class SaleStatus(models.TextChoices):
    """
    Closed sale status domain.

    Only COMPLETED and CANCELLED carry stock side effects; see
    sales.services.sale_lifecycle for the transition table.
    """

    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    PAID = "paid", "Paid"


class Sale(models.Model):
    """
    Represents a POS checkout transaction.

    GUARANTEES:
    - `total` is immutable once set at creation
    - `total_returned` is the running sum of refunds from COMPLETED returns
    - `adjusted_total == total - total_returned` (recomputed on every save)
    - status is mutated ONLY by the sale lifecycle manager
    - never deleted (returns reference it with PROTECT)
    """

    STATUS_PENDING = SaleStatus.PENDING
    STATUS_COMPLETED = SaleStatus.COMPLETED
    STATUS_CANCELLED = SaleStatus.CANCELLED
    STATUS_PAID = SaleStatus.PAID

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_no = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated invoice / receipt number",
    )

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )

    customer = models.CharField(max_length=150, blank=True, default="")
    customer_tax_id = models.CharField(max_length=32, blank=True, default="")
    is_final_consumer = models.BooleanField(default=True)

    payment_method = models.CharField(
        max_length=32,
        default="cash",
        help_text="cash/card/transfer",
    )

    status = models.CharField(
        max_length=32,
        choices=SaleStatus.choices,
        default=SaleStatus.PENDING,
    )

    items_count = models.PositiveIntegerField(default=0)

    subtotal = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    discount_total = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_returned = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    adjusted_total = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    sold_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sold_at", "-created_at"]
        indexes = [
            models.Index(fields=["sold_at"], name="sale_sold_at_idx"),
            models.Index(fields=["status"], name="sale_status_idx"),
            models.Index(fields=["invoice_no"], name="sale_invoice_no_idx"),
        ]

    _IMMUTABLE_FIELDS = (
        "subtotal",
        "discount_total",
        "total",
    )

    def _validate_immutable(self, previous: "Sale"):
        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Sale field '{field}' is immutable once the sale is created."
                )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.invoice_no:
            prefix = timezone.now().strftime("INV%Y%m%d")
            self.invoice_no = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

        self.adjusted_total = Decimal(self.total) - Decimal(self.total_returned or 0)

        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_returned" in update_fields:
            kwargs["update_fields"] = {*update_fields, "adjusted_total"}

        super().save(*args, **kwargs)

    @property
    def is_completed(self) -> bool:
        return self.status == SaleStatus.COMPLETED

    def __str__(self):
        return f"{self.invoice_no} | {self.total}"
