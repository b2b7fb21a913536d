# sales/serializers/sale_item.py

from rest_framework import serializers

from sales.models import SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    """
    Sale line item serializer (read-only).
    `qty` is net of COMPLETED returns.
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    line_total = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "line_no",
            "product",
            "product_name",
            "sku",
            "qty",
            "price",
            "line_total",
        ]
        read_only_fields = fields


class SaleLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    qty = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
    )
