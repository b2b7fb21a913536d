# sales/admin.py

from django.contrib import admin

from sales.models import Sale, SaleItem


# ======================================================
# SALE ADMIN
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = ("line_no", "product", "qty", "price", "created_at")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_no",
        "status",
        "total",
        "total_returned",
        "adjusted_total",
        "sold_at",
    )
    # Status changes must go through the lifecycle API (stock side effects).
    readonly_fields = (
        "invoice_no",
        "status",
        "items_count",
        "subtotal",
        "discount_total",
        "total",
        "total_returned",
        "adjusted_total",
        "created_at",
    )
    search_fields = ("invoice_no", "customer")
    list_filter = ("status", "sold_at")
    inlines = [SaleItemInline]
