# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Sales history (list + retrieve) with status / period filters.
- Sale creation (pending by default; a non-pending initial status goes
  through the sale lifecycle in the same transaction).
- Status transitions (the ONLY HTTP path that moves stock for sales).

Security:
- Requires IsAuthenticated (JWT)

Errors:
- LifecycleError subclasses -> {"error": {"code", "message"}} with the
  error's HTTP status.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import StandardPagination, lifecycle_error_response
from core.engine import get_engine
from core.exceptions import LifecycleError
from sales.api.filters import SaleFilter
from sales.models import Sale
from sales.serializers import (
    SaleCreateSerializer,
    SaleSerializer,
    SaleStatusSerializer,
)


class SaleViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardPagination
    filterset_class = SaleFilter

    # ======================================================
    # QUERYSET
    # ======================================================

    def get_queryset(self):
        return (
            Sale.objects.all()
            .select_related("created_by")
            .prefetch_related("items", "items__product")
            .order_by("-sold_at", "-created_at")
        )

    # ======================================================
    # CREATE
    # POST /api/sales/
    # ======================================================

    @extend_schema(
        request=SaleCreateSerializer,
        responses={201: SaleSerializer},
    )
    def create(self, request):
        ser = SaleCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        data = dict(ser.validated_data)
        items = [
            {
                "product_id": line["product_id"],
                "qty": line["qty"],
                "price": line.get("price"),
            }
            for line in data.pop("items")
        ]

        try:
            sale, _ = get_engine().create_sale(
                items=items,
                user=request.user,
                **data,
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        sale = self.get_queryset().get(pk=sale.pk)
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    # ======================================================
    # STATUS TRANSITION
    # PATCH /api/sales/<id>/status/
    # ======================================================

    @extend_schema(
        request=SaleStatusSerializer,
        responses={200: SaleSerializer},
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        ser = SaleStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            result = get_engine().transition_sale_status(pk, ser.validated_data["status"])
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        sale = self.get_queryset().get(pk=result.sale.pk)
        return Response(
            {
                "sale": SaleSerializer(sale).data,
                "transition": result.transition,
                "stock_adjustment": result.stock_adjustment,
            },
            status=status.HTTP_200_OK,
        )
