# returns/serializers/sale_return.py

from rest_framework import serializers

from returns.models import Return, ReturnItem


class ReturnItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = ReturnItem
        fields = [
            "id",
            "line_no",
            "sale_item",
            "product",
            "product_name",
            "qty_returned",
            "refund_amount",
            "reason",
        ]
        read_only_fields = fields


class ReturnSerializer(serializers.ModelSerializer):
    """
    Return read serializer (list / retrieve / lifecycle responses).
    """

    items = ReturnItemSerializer(many=True, read_only=True)
    invoice_no = serializers.CharField(source="sale.invoice_no", read_only=True)
    processed_by = serializers.SerializerMethodField()

    class Meta:
        model = Return
        fields = [
            "id",
            "sale",
            "invoice_no",
            "status",
            "stock_restoration",
            "reason",
            "notes",
            "total_refund",
            "items_count",
            "return_date",
            "processed_at",
            "processed_by",
            "items",
        ]
        read_only_fields = fields

    def get_processed_by(self, obj):
        user = getattr(obj, "processed_by", None)
        return getattr(user, "username", None) if user else None


# ==========================================================
# COMMAND SERIALIZERS
# ==========================================================

class ReturnLineInputSerializer(serializers.Serializer):
    sale_item_id = serializers.UUIDField()
    product_id = serializers.UUIDField(required=False, allow_null=True)
    qty_returned = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ReturnCreateSerializer(serializers.Serializer):
    sale_id = serializers.UUIDField()
    items = ReturnLineInputSerializer(many=True, allow_empty=False)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ReturnStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    # Only meaningful when moving to approved; omitted means true.
    restore_stock = serializers.BooleanField(required=False, allow_null=True, default=None)
