import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "invoice_no",
                    models.CharField(
                        blank=True,
                        help_text="System-generated invoice / receipt number",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("customer", models.CharField(blank=True, default="", max_length=150)),
                ("customer_tax_id", models.CharField(blank=True, default="", max_length=32)),
                ("is_final_consumer", models.BooleanField(default=True)),
                ("payment_method", models.CharField(default="cash", help_text="cash/card/transfer", max_length=32)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("paid", "Paid"),
                        ],
                        default="pending",
                        max_length=32,
                    ),
                ),
                ("items_count", models.PositiveIntegerField(default=0)),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("discount_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total_returned", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("adjusted_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("sold_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Cashier / staff who processed the sale",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-sold_at", "-created_at"],
                "indexes": [
                    models.Index(fields=["sold_at"], name="sale_sold_at_idx"),
                    models.Index(fields=["status"], name="sale_status_idx"),
                    models.Index(fields=["invoice_no"], name="sale_invoice_no_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("line_no", models.PositiveSmallIntegerField(default=1)),
                ("qty", models.PositiveIntegerField()),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="sales.sale",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_items",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["line_no", "created_at"],
                "indexes": [
                    models.Index(fields=["sale", "created_at"], name="saleitem_sale_created_idx"),
                    models.Index(fields=["product", "created_at"], name="saleitem_product_created_idx"),
                ],
            },
        ),
    ]
