# returns/api/urls.py

"""
RETURNS API URLS

Provides:
    GET   /api/returns/                 list (status, sale_id, page, page_size)
    POST  /api/returns/                 create (pending)
    GET   /api/returns/<uuid>/          retrieve
    PATCH /api/returns/<uuid>/status/   lifecycle transition
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from returns.api.viewsets.sale_return import ReturnViewSet

router = SimpleRouter()
router.register(r"", ReturnViewSet, basename="returns")

urlpatterns = [
    path("", include(router.urls)),
]
