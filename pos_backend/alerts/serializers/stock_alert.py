# alerts/serializers/stock_alert.py

from rest_framework import serializers

from alerts.models import StockAlert


class StockAlertSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source="type.code", read_only=True)
    priority = serializers.CharField(source="priority.code", read_only=True)
    state = serializers.CharField(source="state.code", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = StockAlert
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "type",
            "priority",
            "state",
            "title",
            "message",
            "current_stock",
            "min_stock",
            "timestamp",
            "resolved",
        ]
        read_only_fields = fields
