# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Sale, SaleStatus

from .sale_item import SaleItemSerializer, SaleLineInputSerializer


class SaleSerializer(serializers.ModelSerializer):
    """
    Sale read serializer (list / retrieve / lifecycle responses).
    """

    items = SaleItemSerializer(many=True, read_only=True)
    created_by = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            "id",
            "invoice_no",
            "status",
            "customer",
            "customer_tax_id",
            "is_final_consumer",
            "payment_method",
            "items_count",
            "subtotal",
            "discount_total",
            "total",
            "total_returned",
            "adjusted_total",
            "sold_at",
            "created_at",
            "created_by",
            "items",
        ]
        read_only_fields = fields

    def get_created_by(self, obj):
        user = getattr(obj, "created_by", None)
        return getattr(user, "username", None) if user else None


# ==========================================================
# COMMAND SERIALIZERS
# ==========================================================

class SaleCreateSerializer(serializers.Serializer):
    items = SaleLineInputSerializer(many=True, allow_empty=False)

    customer = serializers.CharField(required=False, allow_blank=True, default="")
    customer_tax_id = serializers.CharField(required=False, allow_blank=True, default="")
    is_final_consumer = serializers.BooleanField(required=False, default=True)
    payment_method = serializers.CharField(required=False, default="cash")
    discount_total = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        default=0,
    )
    sold_at = serializers.DateTimeField(required=False, allow_null=True)

    # Initial status; anything other than pending goes through the lifecycle.
    status = serializers.CharField(required=False, default=SaleStatus.PENDING)


class SaleStatusSerializer(serializers.Serializer):
    # Unknown values surface as invalid_transition (409).
    status = serializers.CharField()
