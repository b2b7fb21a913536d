# alerts/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from alerts.api.views import StockAlertViewSet

router = SimpleRouter()
router.register(r"", StockAlertViewSet, basename="alerts")

urlpatterns = [
    path("", include(router.urls)),
]
