# sales/tests/test_checkout.py

import uuid
from decimal import Decimal

from django.test import TestCase

from core.exceptions import InvalidPrecondition, NotFound
from core.tests.helpers import make_product
from sales.models import SaleStatus
from sales.services.checkout import create_sale


class CreateSaleTests(TestCase):
    def setUp(self):
        self.a = make_product("CHK-A", price="10.00", stock=10)
        self.b = make_product("CHK-B", price="20.00", stock=10)

    def test_totals_and_lines(self):
        sale = create_sale(
            items=[
                {"product_id": self.a.id, "qty": 5},
                {"product_id": self.b.id, "qty": 3, "price": "19.99"},
            ],
            discount_total="4.97",
            customer="Walk-in",
        )

        self.assertEqual(sale.status, SaleStatus.PENDING)
        self.assertEqual(sale.items_count, 8)
        self.assertEqual(sale.subtotal, Decimal("109.97"))
        self.assertEqual(sale.total, Decimal("105.00"))
        self.assertEqual(sale.adjusted_total, Decimal("105.00"))

        lines = list(sale.items.order_by("line_no"))
        self.assertEqual([ln.line_no for ln in lines], [1, 2])
        self.assertEqual(lines[0].price, Decimal("10.00"))
        self.assertEqual(lines[1].price, Decimal("19.99"))

    def test_stock_is_untouched(self):
        create_sale(items=[{"product_id": self.a.id, "qty": 5}])
        self.a.refresh_from_db()
        self.assertEqual(self.a.stock, 10)

    def test_empty_items_rejected(self):
        with self.assertRaises(InvalidPrecondition):
            create_sale(items=[])

    def test_non_positive_quantity_rejected(self):
        with self.assertRaises(InvalidPrecondition):
            create_sale(items=[{"product_id": self.a.id, "qty": 0}])

    def test_discount_above_subtotal_rejected(self):
        with self.assertRaises(InvalidPrecondition):
            create_sale(items=[{"product_id": self.a.id, "qty": 1}], discount_total="10.01")

    def test_unknown_product(self):
        with self.assertRaises(NotFound):
            create_sale(items=[{"product_id": uuid.uuid4(), "qty": 1}])
