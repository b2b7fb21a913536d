# core/tests/test_unit_of_work.py

from unittest import mock

from django.db import InterfaceError, OperationalError, connection
from django.test import TestCase

from core.exceptions import InvalidPrecondition, TransientStoreFailure
from core.unit_of_work import UnitOfWork
from products.models import Product


class UnitOfWorkTests(TestCase):
    def setUp(self):
        self.uow = UnitOfWork()
        self.product = Product.objects.create(sku="UOW-1", name="Widget", price="5.00", stock=10)

    def test_run_returns_value_inside_transaction(self):
        def fn():
            self.assertTrue(connection.in_atomic_block)
            return 42

        self.assertEqual(self.uow.run(fn), 42)

    def test_domain_error_rolls_back_and_propagates(self):
        def fn():
            Product.objects.filter(pk=self.product.pk).update(stock=0)
            raise InvalidPrecondition("nope")

        with self.assertRaises(InvalidPrecondition):
            self.uow.run(fn)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

    def test_operational_error_maps_to_transient_failure(self):
        def fn():
            raise OperationalError("canceling statement due to statement timeout")

        with self.assertRaises(TransientStoreFailure) as ctx:
            self.uow.run(fn)

        self.assertIn("statement timeout", ctx.exception.message)

    def test_lost_connection_maps_to_transient_failure(self):
        def fn():
            raise InterfaceError("connection already closed")

        with self.assertRaises(TransientStoreFailure) as ctx:
            self.uow.run(fn)

        self.assertIn("connection already closed", ctx.exception.message)
        self.assertEqual(ctx.exception.http_status, 503)

    def test_execution_timeout_only_applied_on_postgresql(self):
        conn = mock.MagicMock()
        with mock.patch.object(
            UnitOfWork, "connection", new_callable=mock.PropertyMock, return_value=conn
        ):
            conn.vendor = "sqlite"
            self.uow._apply_execution_timeout()
            conn.cursor.assert_not_called()

            conn.vendor = "postgresql"
            self.uow._apply_execution_timeout()
            cursor = conn.cursor.return_value.__enter__.return_value
            cursor.execute.assert_any_call(
                "SELECT set_config('statement_timeout', %s, true)", ["15000ms"]
            )
            cursor.execute.assert_any_call(
                "SELECT set_config('lock_timeout', %s, true)", ["15000ms"]
            )
