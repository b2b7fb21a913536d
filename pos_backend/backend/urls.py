# backend/urls.py
"""
PROJECT URLS

Everything lives under /api/. The Django admin mount point comes from
settings.ADMIN_PATH (default "admin/").
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.api import health_check, lifecycle_stats


@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "service": "pos-lifecycle",
            "auth": "/api/auth/jwt/create/",
            "docs": "/api/docs/",
            "endpoints": {
                "sales": "/api/sales/",
                "returns": "/api/returns/",
                "alerts": "/api/alerts/",
                "lifecycle_stats": "/api/lifecycle/stats/",
            },
        }
    )


ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/").rstrip("/") + "/"

api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("sales/", include("sales.api.urls")),
    path("returns/", include("returns.api.urls")),
    path("alerts/", include("alerts.api.urls")),
    path("lifecycle/stats/", lifecycle_stats, name="lifecycle-stats"),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
