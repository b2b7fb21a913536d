# sales/tests/test_sale_lifecycle.py

import uuid
from decimal import Decimal
from unittest import mock

from django.test import TestCase

from alerts.models import StockAlert
from core.exceptions import InvalidTransition, NotFound
from core.tests.helpers import build_engine, make_product, make_sale
from sales.models import Sale, SaleStatus
from sales.services.sale_lifecycle import parse_sale_status


class SaleLifecycleTests(TestCase):
    """
    Sale with items {A: 5 @ 10, B: 3 @ 20}.

    GUARANTEES:
    - pending -> completed decrements stock exactly once
    - completed -> cancelled restores it exactly
    - same-status calls are no-ops
    - a failure anywhere rolls back everything
    """

    def setUp(self):
        self.engine = build_engine()
        self.a = make_product("SKU-A", name="Product A", price="10.00", stock=50, min_stock=5)
        self.b = make_product("SKU-B", name="Product B", price="20.00", stock=30, min_stock=5)
        self.sale = make_sale([(self.a, 5, "10.00"), (self.b, 3, "20.00")])

    def _stock(self):
        self.a.refresh_from_db()
        self.b.refresh_from_db()
        return self.a.stock, self.b.stock

    # ======================================================
    # COMPLETION / CANCELLATION
    # ======================================================

    def test_completion_decrements_each_product(self):
        result = self.engine.transition_sale_status(self.sale.id, "completed")

        self.assertEqual(result.stock_adjustment, "stock_decremented")
        self.assertEqual(result.transition, "pending -> completed")
        self.assertEqual(self._stock(), (45, 27))

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.status, SaleStatus.COMPLETED)

    def test_retrying_completion_is_a_noop(self):
        self.engine.transition_sale_status(self.sale.id, "completed")
        result = self.engine.transition_sale_status(self.sale.id, "Completed")

        self.assertEqual(result.stock_adjustment, "none")
        self.assertEqual(self._stock(), (45, 27))

    def test_cancellation_restores_stock(self):
        self.engine.transition_sale_status(self.sale.id, "completed")
        result = self.engine.transition_sale_status(self.sale.id, "cancelled")

        self.assertEqual(result.stock_adjustment, "stock_restored")
        self.assertEqual(self._stock(), (50, 30))

    def test_cancellation_after_partial_return_restores_pre_sale_stock(self):
        self.engine.transition_sale_status(self.sale.id, "completed")
        item_a = self.sale.items.get(product=self.a)
        ret = self.engine.create_return(
            self.sale.id, [{"sale_item_id": item_a.id, "qty_returned": 2}]
        )
        self.engine.transition_return_status(ret.id, "completed")
        self.assertEqual(self._stock(), (47, 27))

        result = self.engine.transition_sale_status(self.sale.id, "cancelled")

        self.assertEqual(result.stock_adjustment, "stock_restored")
        self.assertEqual(self._stock(), (50, 30))

    def test_cancelling_a_pending_sale_has_no_stock_effect(self):
        result = self.engine.transition_sale_status(self.sale.id, "cancelled")

        self.assertEqual(result.stock_adjustment, "none")
        self.assertEqual(self._stock(), (50, 30))

    def test_duplicate_product_lines_are_grouped(self):
        sale = make_sale([(self.a, 2, "10.00"), (self.a, 3, "10.00")])

        self.engine.transition_sale_status(sale.id, "completed")

        self.assertEqual(self._stock(), (45, 30))

    def test_non_stock_statuses_move_freely(self):
        result = self.engine.transition_sale_status(self.sale.id, "paid")
        self.assertEqual(result.stock_adjustment, "none")

        result = self.engine.transition_sale_status(self.sale.id, "pending")
        self.assertEqual(result.transition, "paid -> pending")
        self.assertEqual(self._stock(), (50, 30))

    # ======================================================
    # ALERTS
    # ======================================================

    def test_completion_raises_low_stock_alert(self):
        low = make_product("SKU-LOW", stock=6, min_stock=5)
        sale = make_sale([(low, 4, "1.00")])

        self.engine.transition_sale_status(sale.id, "completed")

        alert = StockAlert.objects.get(product=low, resolved=False)
        self.assertEqual(alert.current_stock, 2)

        self.engine.transition_sale_status(sale.id, "cancelled")
        self.assertFalse(StockAlert.objects.filter(product=low, resolved=False).exists())

    # ======================================================
    # ERRORS
    # ======================================================

    def test_unknown_status_is_invalid_transition(self):
        with self.assertRaises(InvalidTransition):
            self.engine.transition_sale_status(self.sale.id, "shipped")

    def test_missing_sale_is_not_found(self):
        with self.assertRaises(NotFound):
            self.engine.transition_sale_status(uuid.uuid4(), "completed")

    def test_failure_during_alerts_rolls_back_stock_and_status(self):
        with mock.patch.object(
            self.engine.recalculator, "recalculate", side_effect=RuntimeError("alerts down")
        ):
            with self.assertRaises(RuntimeError):
                self.engine.transition_sale_status(self.sale.id, "completed")

        self.assertEqual(self._stock(), (50, 30))
        self.sale.refresh_from_db()
        self.assertEqual(self.sale.status, SaleStatus.PENDING)


class ParseSaleStatusTests(TestCase):
    def test_accepts_values_and_labels(self):
        self.assertEqual(parse_sale_status("completed"), SaleStatus.COMPLETED)
        self.assertEqual(parse_sale_status(" Cancelled "), SaleStatus.CANCELLED)

    def test_rejects_unknown(self):
        with self.assertRaises(InvalidTransition):
            parse_sale_status("")


class SaleTotalsTests(TestCase):
    def test_core_totals_are_immutable(self):
        a = make_product("SKU-IMM")
        sale = make_sale([(a, 1, "10.00")])

        sale.total = Decimal("1.00")
        with self.assertRaises(ValueError):
            sale.save()

    def test_adjusted_total_follows_total_returned(self):
        a = make_product("SKU-ADJ")
        sale = make_sale([(a, 2, "10.00")])

        sale.total_returned = Decimal("7.50")
        sale.save(update_fields=["total_returned"])

        sale = Sale.objects.get(pk=sale.pk)
        self.assertEqual(sale.adjusted_total, Decimal("12.50"))
