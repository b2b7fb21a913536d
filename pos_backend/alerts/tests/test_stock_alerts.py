# alerts/tests/test_stock_alerts.py

from django.test import SimpleTestCase, TestCase

from alerts.models import AlertPriority, AlertState, AlertType, StockAlert
from alerts.services.stock_alerts import (
    AlertCatalogCache,
    StockAlertRecalculator,
    classify_stock,
    resolve_alert,
)
from core.exceptions import NotFound
from core.tests.helpers import make_product
from products.services.inventory import StockLevel


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class ClassifyStockTests(SimpleTestCase):
    def test_severity_bands(self):
        self.assertEqual(classify_stock(0, 10), (AlertType.OUT_OF_STOCK, AlertPriority.CRITICAL))
        self.assertEqual(classify_stock(-3, 10), (AlertType.OUT_OF_STOCK, AlertPriority.CRITICAL))
        self.assertEqual(classify_stock(2, 10), (AlertType.LOW_STOCK, AlertPriority.HIGH))
        self.assertEqual(classify_stock(5, 10), (AlertType.LOW_STOCK, AlertPriority.MEDIUM))
        self.assertEqual(classify_stock(6, 10), (AlertType.LOW_STOCK, AlertPriority.MEDIUM))
        self.assertEqual(classify_stock(9, 10), (AlertType.LOW_STOCK, AlertPriority.LOW))


class AlertCatalogCacheTests(TestCase):
    def test_reloads_only_after_ttl(self):
        clock = FakeClock()
        cache = AlertCatalogCache(ttl=60, clock=clock)

        first = cache.get()
        self.assertEqual(cache.loads, 1)
        self.assertEqual(first.state_active.code, AlertState.ACTIVE)

        clock.now += 59
        self.assertIs(cache.get(), first)
        self.assertEqual(cache.loads, 1)

        clock.now += 1
        cache.get()
        self.assertEqual(cache.loads, 2)

    def test_invalidate_forces_reload(self):
        cache = AlertCatalogCache(ttl=60, clock=FakeClock())
        cache.get()
        cache.invalidate()
        cache.get()
        self.assertEqual(cache.loads, 2)

    def test_stale_rows_served_inside_window(self):
        clock = FakeClock()
        cache = AlertCatalogCache(ttl=60, clock=clock)
        cache.get()

        AlertType.objects.create(code="custom", name="Custom")
        self.assertNotIn("custom", cache.get().types)

        clock.now += 61
        self.assertIn("custom", cache.get().types)


class StockAlertRecalculatorTests(TestCase):
    """
    GUARANTEES:
    - healthy products have no open alerts afterwards
    - an unhealthy product keeps ONE open alert, refreshed in place
    - repeated recalculation does not duplicate alerts
    """

    def setUp(self):
        self.recalc = StockAlertRecalculator(AlertCatalogCache(ttl=60))
        self.product = make_product("ALR-1", name="Paracetamol", stock=2, min_stock=10)

    def _open_alerts(self):
        return StockAlert.objects.filter(product=self.product, resolved=False)

    def test_creates_alert_for_low_stock(self):
        result = self.recalc.recalculate([StockLevel(self.product.id, 2, 10)])

        self.assertEqual(result.created, 1)
        alert = self._open_alerts().get()
        self.assertEqual(alert.type.code, AlertType.LOW_STOCK)
        self.assertEqual(alert.priority.code, AlertPriority.HIGH)
        self.assertEqual(alert.state.code, AlertState.ACTIVE)
        self.assertEqual(alert.title, "Low stock")
        self.assertEqual(alert.message, "Stock below minimum (2/10).")
        self.assertEqual(alert.current_stock, 2)

    def test_out_of_stock_is_critical(self):
        self.recalc.recalculate([StockLevel(self.product.id, 0, 10)])

        alert = self._open_alerts().get()
        self.assertEqual(alert.type.code, AlertType.OUT_OF_STOCK)
        self.assertEqual(alert.priority.code, AlertPriority.CRITICAL)
        self.assertEqual(alert.title, "Out of stock")

    def test_repeated_recalculation_updates_in_place(self):
        self.recalc.recalculate([StockLevel(self.product.id, 2, 10)])
        result = self.recalc.recalculate([StockLevel(self.product.id, 7, 10)])

        self.assertEqual(result.updated, 1)
        self.assertEqual(result.created, 0)
        alert = self._open_alerts().get()
        self.assertEqual(alert.current_stock, 7)
        self.assertEqual(alert.priority.code, AlertPriority.LOW)

    def test_healthy_stock_resolves_open_alerts(self):
        self.recalc.recalculate([StockLevel(self.product.id, 2, 10)])
        result = self.recalc.recalculate([StockLevel(self.product.id, 10, 10)])

        self.assertEqual(result.resolved, 1)
        self.assertFalse(self._open_alerts().exists())
        alert = StockAlert.objects.get(product=self.product)
        self.assertEqual(alert.state.code, AlertState.RESOLVED)

    def test_batch_with_mixed_products(self):
        healthy = make_product("ALR-2", stock=50, min_stock=5)
        self.recalc.recalculate([StockLevel(healthy.id, 1, 5)])

        result = self.recalc.recalculate(
            [
                StockLevel(self.product.id, 3, 10),
                StockLevel(healthy.id, 50, 5),
            ]
        )

        self.assertEqual(result.resolved, 1)
        self.assertEqual(result.created, 1)
        self.assertFalse(StockAlert.objects.filter(product=healthy, resolved=False).exists())

    def test_empty_batch_is_noop(self):
        result = self.recalc.recalculate([])
        self.assertEqual((result.resolved, result.updated, result.created), (0, 0, 0))
        self.assertEqual(self.recalc.cache.loads, 0)


class ResolveAlertTests(TestCase):
    def setUp(self):
        self.cache = AlertCatalogCache(ttl=60)
        self.product = make_product("ALR-3", stock=1, min_stock=10)
        StockAlertRecalculator(self.cache).recalculate([StockLevel(self.product.id, 1, 10)])

    def test_manual_resolution(self):
        alert = StockAlert.objects.get(product=self.product)

        resolved = resolve_alert(alert.id, cache=self.cache)

        self.assertTrue(resolved.resolved)
        self.assertEqual(resolved.state.code, AlertState.RESOLVED)

    def test_unknown_alert(self):
        with self.assertRaises(NotFound):
            resolve_alert("00000000-0000-0000-0000-000000000000", cache=self.cache)
