# core/api.py

"""
======================================================
PATH: core/api.py
======================================================
SHARED API PLUMBING

- error_response: canonical error payload {"error": {"code", "message"}}
- lifecycle_error_response: LifecycleError -> canonical payload + status
- StandardPagination: page / page_size pagination used by list endpoints
- lifecycle_stats: admission controller snapshot
- health_check: public liveness + DB round trip
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, connections
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .engine import get_engine
from .exceptions import InsufficientQuantity, LifecycleError, TransientStoreFailure

logger = logging.getLogger(__name__)


# ======================================================
# API ERROR NORMALIZATION
# ======================================================

def error_response(*, code: str, message: str, http_status: int, **details):
    """
    Canonical API error response.
    """
    payload = {"code": code, "message": message}
    payload.update(details)
    return Response({"error": payload}, status=http_status)


def lifecycle_error_response(exc: LifecycleError):
    details = {}
    if isinstance(exc, InsufficientQuantity):
        details = {
            "product": exc.product_name,
            "available": exc.available,
            "requested": exc.requested,
            "shortfall": exc.shortfall,
        }

    if isinstance(exc, TransientStoreFailure):
        logger.warning(
            "Lifecycle request failed transiently",
            extra={"code": exc.code, "error": exc.message},
        )

    return error_response(
        code=exc.code,
        message=exc.message,
        http_status=exc.http_status,
        **details,
    )


# ======================================================
# PAGINATION
# ======================================================

class StandardPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 1000


# ======================================================
# ENGINE STATS
# ======================================================

@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "running": {"type": "integer"},
                "queued": {"type": "integer"},
                "max_concurrent": {"type": "integer"},
                "alert_catalog_loads": {"type": "integer"},
            },
        }
    },
)
@api_view(["GET"])
def lifecycle_stats(request):
    return Response(get_engine().stats(), status=status.HTTP_200_OK)


# ======================================================
# HEALTH (PUBLIC)
# ======================================================

@extend_schema(
    responses={
        200: {"type": "object", "properties": {"status": {"type": "string"}, "db": {"type": "string"}}},
        503: {"type": "object", "properties": {"status": {"type": "string"}, "db": {"type": "string"}}},
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """Liveness plus a round trip to the default database."""
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as exc:
        logger.error("Health check failed: database unreachable", extra={"error": str(exc)})
        return Response({"status": "degraded", "db": "down"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response({"status": "ok", "db": "ok"})
