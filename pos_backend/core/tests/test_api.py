# core/tests/test_api.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

User = get_user_model()


class OperationalEndpointTests(TestCase):
    def test_health_is_public(self):
        res = APIClient().get("/api/health/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data, {"status": "ok", "db": "ok"})

    def test_lifecycle_stats(self):
        client = APIClient()
        client.force_authenticate(User.objects.create_user(username="ops", password="pass"))

        res = client.get("/api/lifecycle/stats/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["running"], 0)
        self.assertEqual(res.data["queued"], 0)
        self.assertEqual(res.data["max_concurrent"], 5)
