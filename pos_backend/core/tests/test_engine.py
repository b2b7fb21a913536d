# core/tests/test_engine.py

import threading
import time
from unittest import mock

from django.db import connection
from django.test import SimpleTestCase, TestCase, TransactionTestCase, override_settings

from alerts.services.stock_alerts import AlertCatalogCache, StockAlertRecalculator
from core.admission import AdmissionController
from core.engine import LifecycleEngine, get_engine, reset_engine
from core.exceptions import InvalidPrecondition
from core.tests.helpers import build_engine, make_product, make_sale
from core.unit_of_work import UnitOfWork
from sales.models import Sale, SaleStatus


class PassThroughUnitOfWork:
    """Runs the callable directly; no database involved."""

    statement_timeout_ms = None

    def run(self, fn, *args, **kwargs):
        return fn(*args, **kwargs)

    def close(self):
        pass


class EngineAdmissionTests(SimpleTestCase):
    """
    20 concurrent sale transitions through an engine capped at 5.
    """

    def test_concurrent_transitions_respect_admission_cap(self):
        engine = LifecycleEngine(
            admission=AdmissionController(max_concurrent=5),
            unit_of_work=PassThroughUnitOfWork(),
            recalculator=StockAlertRecalculator(AlertCatalogCache()),
        )

        lock = threading.Lock()
        in_flight = 0
        peak = 0
        completed = []

        def fake_transition(sale_id, target):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            time.sleep(0.02)
            with lock:
                in_flight -= 1
            return (sale_id, target)

        def worker(n):
            result = engine.transition_sale_status(f"sale-{n}", "completed")
            with lock:
                completed.append(result)

        with mock.patch.object(engine.sales, "transition", side_effect=fake_transition):
            threads = [threading.Thread(target=worker, args=(n,)) for n in range(20)]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=10)

        self.assertLessEqual(peak, 5)
        self.assertEqual(len(completed), 20)
        self.assertEqual(engine.stats()["running"], 0)


class RecordingUnitOfWork:
    """
    Real UnitOfWork that records how many transactions were admitted at
    once. The store work itself is serialized because the in-memory SQLite
    test database takes table locks on write.
    """

    def __init__(self):
        self.inner = UnitOfWork()
        self.statement_timeout_ms = self.inner.statement_timeout_ms
        self.counter_lock = threading.Lock()
        self.store_lock = threading.Lock()
        self.in_flight = 0
        self.peak = 0

    def run(self, fn, *args, **kwargs):
        with self.counter_lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            time.sleep(0.01)
            with self.store_lock:
                return self.inner.run(fn, *args, **kwargs)
        finally:
            with self.counter_lock:
                self.in_flight -= 1

    def close(self):
        self.inner.close()


class EngineConcurrentSaleTransitionTests(TransactionTestCase):
    """
    20 real pending -> completed transitions from 20 threads, cap 5.
    """

    serialized_rollback = True

    def test_all_transitions_apply_and_admission_cap_holds(self):
        product = make_product("CONC-A", stock=100, min_stock=0)
        sales = [make_sale([(product, 1, "10.00")]) for _ in range(20)]

        uow = RecordingUnitOfWork()
        engine = LifecycleEngine(
            admission=AdmissionController(max_concurrent=5, timeout=30.0),
            unit_of_work=uow,
            recalculator=StockAlertRecalculator(AlertCatalogCache()),
        )

        results = []
        errors = []
        results_lock = threading.Lock()

        def worker(sale_id):
            try:
                result = engine.transition_sale_status(sale_id, "completed")
                with results_lock:
                    results.append(result.stock_adjustment)
            except Exception as exc:  # surfaced through the assertion below
                with results_lock:
                    errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker, args=(s.id,)) for s in sales]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        self.assertEqual(errors, [])
        self.assertEqual(results, ["stock_decremented"] * 20)
        self.assertLessEqual(uow.peak, 5)
        self.assertEqual(engine.stats()["running"], 0)

        product.refresh_from_db()
        self.assertEqual(product.stock, 80)
        self.assertEqual(
            Sale.objects.filter(status=SaleStatus.COMPLETED).count(), 20
        )


class EngineSaleCreationTests(TestCase):
    def setUp(self):
        self.engine = build_engine()
        self.product = make_product("ENG-A", price="10.00", stock=20, min_stock=2)

    def test_pending_sale_does_not_touch_stock(self):
        sale, result = self.engine.create_sale(
            items=[{"product_id": self.product.id, "qty": 4}],
        )

        self.assertIsNone(result)
        self.assertEqual(sale.status, SaleStatus.PENDING)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 20)

    def test_completed_sale_decrements_stock_once(self):
        sale, result = self.engine.create_sale(
            status="completed",
            items=[{"product_id": self.product.id, "qty": 4}],
        )

        self.assertEqual(result.stock_adjustment, "stock_decremented")
        self.assertEqual(sale.status, SaleStatus.COMPLETED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 16)

    def test_failed_creation_leaves_nothing_behind(self):
        with self.assertRaises(InvalidPrecondition):
            self.engine.create_sale(
                status="completed",
                items=[{"product_id": self.product.id, "qty": 1}],
                discount_total="99.00",
            )

        self.assertEqual(Sale.objects.count(), 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 20)


class DefaultEngineTests(SimpleTestCase):
    def tearDown(self):
        reset_engine()

    @override_settings(
        LIFECYCLE={
            "MAX_CONCURRENT": 3,
            "ADMISSION_TIMEOUT": 1.5,
            "STATEMENT_TIMEOUT_MS": 2000,
            "ALERT_CATALOG_TTL": 30,
        }
    )
    def test_default_engine_is_built_from_settings(self):
        reset_engine()
        engine = get_engine()

        self.assertIs(get_engine(), engine)
        self.assertEqual(engine.admission.max_concurrent, 3)
        self.assertEqual(engine.admission.timeout, 1.5)
        self.assertEqual(engine.unit_of_work.statement_timeout_ms, 2000)
        self.assertEqual(engine.recalculator.cache.ttl, 30.0)
