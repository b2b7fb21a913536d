# alerts/api/views.py

"""
======================================================
PATH: alerts/api/views.py
======================================================
STOCK ALERTS (POLLED BY THE ALERTS UI)

    GET  /api/alerts/                 open alerts, newest first (max 100)
    GET  /api/alerts/?all=true        include resolved alerts
    POST /api/alerts/<uuid>/resolve/  manual resolution
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from alerts.models import StockAlert
from alerts.serializers import StockAlertSerializer
from alerts.services.stock_alerts import resolve_alert
from core.api import lifecycle_error_response
from core.engine import get_engine
from core.exceptions import LifecycleError

ALERT_LIST_LIMIT = 100


class StockAlertViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = StockAlertSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        qs = StockAlert.objects.select_related("product", "type", "priority", "state")

        show_all = (self.request.query_params.get("all") or "").strip().lower() == "true"
        if not show_all:
            qs = qs.filter(resolved=False)

        return qs.order_by("-timestamp")

    @extend_schema(
        parameters=[OpenApiParameter("all", bool, description="Include resolved alerts")],
    )
    def list(self, request, *args, **kwargs):
        alerts = self.get_queryset()[:ALERT_LIST_LIMIT]
        return Response(StockAlertSerializer(alerts, many=True).data)

    @extend_schema(request=None, responses={200: StockAlertSerializer})
    @action(detail=True, methods=["post"], url_path="resolve")
    def resolve(self, request, pk=None):
        try:
            alert = resolve_alert(pk, cache=get_engine().recalculator.cache)
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        return Response(StockAlertSerializer(alert).data, status=status.HTTP_200_OK)
