# returns/admin.py

from django.contrib import admin

from returns.models import Return, ReturnItem


class ReturnItemInline(admin.TabularInline):
    model = ReturnItem
    extra = 0
    can_delete = False
    readonly_fields = ("line_no", "sale_item", "product", "qty_returned", "refund_amount", "reason")


@admin.register(Return)
class ReturnAdmin(admin.ModelAdmin):
    list_display = ("id", "sale", "status", "stock_restoration", "total_refund", "return_date")
    readonly_fields = (
        "sale",
        "status",
        "stock_restoration",
        "total_refund",
        "items_count",
        "return_date",
        "processed_at",
        "processed_by",
    )
    search_fields = ("sale__invoice_no",)
    list_filter = ("status", "stock_restoration")
    inlines = [ReturnItemInline]

    def has_delete_permission(self, request, obj=None):
        return False
