# sales/api/urls.py

"""
SALES API URLS

Provides:
    GET   /api/sales/                 list (status, period, page, page_size)
    POST  /api/sales/                 create
    GET   /api/sales/<uuid>/          retrieve
    PATCH /api/sales/<uuid>/status/   lifecycle transition
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.sale import SaleViewSet

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
