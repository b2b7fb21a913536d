# alerts/admin.py

from django.contrib import admin

from alerts.models import AlertPriority, AlertState, AlertType, StockAlert


@admin.register(StockAlert)
class StockAlertAdmin(admin.ModelAdmin):
    list_display = ("title", "product", "priority", "current_stock", "min_stock", "resolved", "timestamp")
    list_filter = ("resolved", "priority", "type")
    search_fields = ("product__name", "product__sku")
    readonly_fields = ("product", "type", "priority", "current_stock", "min_stock", "timestamp")


admin.site.register(AlertType)
admin.site.register(AlertPriority)
admin.site.register(AlertState)
