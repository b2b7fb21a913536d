# returns/api/viewsets/sale_return.py

"""
======================================================
PATH: returns/api/viewsets/sale_return.py
======================================================
RETURN VIEWSET (STAFF)

- list / retrieve with status + sale_id filters
- create: records a PENDING return (no stock or sale effect yet)
- status: lifecycle transition (approve / complete / reject)
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
from returns.api.filters import ReturnFilter
from returns.models import Return
from returns.serializers import (
    ReturnCreateSerializer,
    ReturnSerializer,
    ReturnStatusSerializer,
)


class ReturnViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ReturnSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardPagination
    filterset_class = ReturnFilter

    def get_queryset(self):
        return (
            Return.objects.all()
            .select_related("sale", "processed_by")
            .prefetch_related("items", "items__product")
            .order_by("-return_date")
        )

    # ======================================================
    # CREATE
    # ======================================================

    @extend_schema(
        request=ReturnCreateSerializer,
        responses={201: ReturnSerializer},
    )
    def create(self, request):
        ser = ReturnCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        items = [
            {
                "sale_item_id": line["sale_item_id"],
                "product_id": line.get("product_id"),
                "qty_returned": line["qty_returned"],
                "reason": line.get("reason", ""),
            }
            for line in data["items"]
        ]

        try:
            sale_return = get_engine().create_return(
                data["sale_id"],
                items,
                reason=data.get("reason", ""),
                notes=data.get("notes", ""),
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        sale_return = self.get_queryset().get(pk=sale_return.pk)
        return Response(ReturnSerializer(sale_return).data, status=status.HTTP_201_CREATED)

    # ======================================================
    # STATUS TRANSITION
    # ======================================================

    @extend_schema(
        request=ReturnStatusSerializer,
        responses={200: ReturnSerializer},
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        ser = ReturnStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            result = get_engine().transition_return_status(
                pk,
                ser.validated_data["status"],
                restore_stock=ser.validated_data.get("restore_stock"),
                user=request.user,
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        sale_return = self.get_queryset().get(pk=result.sale_return.pk)
        return Response(
            {
                "return": ReturnSerializer(sale_return).data,
                "transition": result.transition,
                "sale_adjustment": result.sale_adjustment,
                "stock_adjustment": result.stock_adjustment,
            },
            status=status.HTTP_200_OK,
        )
