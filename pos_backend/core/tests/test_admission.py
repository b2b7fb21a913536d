# core/tests/test_admission.py

import threading
import time

from django.test import SimpleTestCase

from core.admission import AdmissionController
from core.exceptions import AdmissionTimeout, TransientStoreFailure


def _wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


class AdmissionControllerTests(SimpleTestCase):
    """
    GUARANTEES:
    - never more than max_concurrent critical sections in flight
    - every admitted caller eventually runs
    - waiters are served in arrival order
    - slots are released on failure
    """

    # ======================================================
    # BOUNDED CONCURRENCY
    # ======================================================

    def test_in_flight_never_exceeds_capacity_and_all_complete(self):
        gate = AdmissionController(max_concurrent=3)

        lock = threading.Lock()
        in_flight = 0
        peak = 0
        results = []

        def critical(n):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            time.sleep(0.02)
            with lock:
                in_flight -= 1
            return n

        def worker(n):
            value = gate.run(critical, n)
            with lock:
                results.append(value)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(12)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        self.assertLessEqual(peak, 3)
        self.assertEqual(sorted(results), list(range(12)))

        stats = gate.stats()
        self.assertEqual(stats.running, 0)
        self.assertEqual(stats.queued, 0)
        self.assertEqual(stats.max_concurrent, 3)

    def test_waiters_are_admitted_in_arrival_order(self):
        gate = AdmissionController(max_concurrent=1)
        order = []

        holder = gate.slot()
        holder.__enter__()

        threads = []
        for n in range(5):
            t = threading.Thread(target=gate.run, args=(order.append, n))
            t.start()
            threads.append(t)
            self.assertTrue(_wait_until(lambda n=n: gate.stats().queued == n + 1))

        holder.__exit__(None, None, None)
        for t in threads:
            t.join(timeout=5)

        self.assertEqual(order, [0, 1, 2, 3, 4])

    # ======================================================
    # FAILURE + TIMEOUT
    # ======================================================

    def test_slot_is_released_when_critical_section_fails(self):
        gate = AdmissionController(max_concurrent=1)

        def boom():
            raise ValueError("boom")

        with self.assertRaises(ValueError):
            gate.run(boom)

        self.assertEqual(gate.stats().running, 0)
        self.assertEqual(gate.run(lambda: "ok"), "ok")

    def test_bounded_wait_raises_admission_timeout(self):
        gate = AdmissionController(max_concurrent=1, timeout=0.05)

        with gate.slot():
            with self.assertRaises(AdmissionTimeout) as ctx:
                gate.run(lambda: None)

        self.assertIsInstance(ctx.exception, TransientStoreFailure)
        self.assertEqual(ctx.exception.http_status, 503)
        self.assertEqual(gate.stats().queued, 0)
        self.assertEqual(gate.stats().running, 0)

    def test_capacity_must_be_positive(self):
        with self.assertRaises(ValueError):
            AdmissionController(max_concurrent=0)

    def test_stats_as_dict(self):
        gate = AdmissionController(max_concurrent=2)
        with gate.slot():
            self.assertEqual(
                gate.stats().as_dict(),
                {"running": 1, "queued": 0, "max_concurrent": 2},
            )
