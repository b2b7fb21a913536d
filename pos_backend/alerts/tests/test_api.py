# alerts/tests/test_api.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from alerts.services.stock_alerts import AlertCatalogCache, StockAlertRecalculator
from core.tests.helpers import make_product
from products.services.inventory import StockLevel

User = get_user_model()


class StockAlertApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(User.objects.create_user(username="staff", password="pass"))

        recalc = StockAlertRecalculator(AlertCatalogCache())
        self.low = make_product("AAPI-1", name="Low", stock=1, min_stock=10)
        self.out = make_product("AAPI-2", name="Out", stock=0, min_stock=10)
        recalc.recalculate(
            [StockLevel(self.low.id, 1, 10), StockLevel(self.out.id, 0, 10)]
        )

    def test_list_open_alerts(self):
        res = self.client.get("/api/alerts/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data), 2)
        self.assertEqual(
            {a["priority"] for a in res.data}, {"high", "critical"}
        )

    def test_resolve_then_list(self):
        alert_id = self.client.get("/api/alerts/").data[0]["id"]

        res = self.client.post(f"/api/alerts/{alert_id}/resolve/")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["resolved"])
        self.assertEqual(res.data["state"], "resolved")

        self.assertEqual(len(self.client.get("/api/alerts/").data), 1)
        self.assertEqual(len(self.client.get("/api/alerts/", {"all": "true"}).data), 2)

    def test_resolve_unknown(self):
        res = self.client.post("/api/alerts/00000000-0000-0000-0000-000000000000/resolve/")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"]["code"], "not_found")
