# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Catalog fields (name, sku, price, min_stock) are editable.
- `stock` is read-only: it moves ONLY through the sale/return lifecycle.
"""

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "price", "stock", "min_stock", "is_active")
    readonly_fields = ("stock", "created_at", "updated_at")
    search_fields = ("name", "sku", "barcode")
    list_filter = ("is_active",)
