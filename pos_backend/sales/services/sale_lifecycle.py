"""
SALE LIFECYCLE

Domain rules + the manager that applies sale status transitions.

STATE MODEL:
    pending -> completed -> cancelled     (stock-affecting path)
    any other move (pending <-> paid, ...)  status only

STOCK SIDE EFFECTS (exactly once per transition):
- not completed -> completed : decrement stock by the summed item quantities
- completed -> cancelled     : increment stock back by the remaining sold
                               quantities, minus units an unfinished return
                               already put back on the shelf
- same status                : idempotent no-op, nothing written

The transition table is deliberately permissive: every status may move to
every other status; only the COMPLETED/CANCELLED edges carry side effects.

The manager never opens its own transaction; it must run inside a
UnitOfWork (see core.engine.LifecycleEngine).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce

from alerts.services.stock_alerts import StockAlertRecalculator
from core.exceptions import InvalidTransition, NotFound
from products.services.inventory import (
    decrement_stock,
    group_quantities,
    increment_stock,
)
from sales.models import Sale, SaleStatus

logger = logging.getLogger(__name__)

# ============================================================
# STATE DEFINITIONS
# ============================================================

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    status: {target for target in SaleStatus.values}
    for status in SaleStatus.values
}

STOCK_DECREMENTED = "stock_decremented"
STOCK_RESTORED = "stock_restored"
NO_ADJUSTMENT = "none"


# ============================================================
# DOMAIN RULES
# ============================================================


def parse_sale_status(value) -> SaleStatus:
    """
    Resolve a status by value ("completed") or label ("Completed").
    Unknown targets raise InvalidTransition.
    """
    raw = str(value or "").strip().lower()
    for status in SaleStatus:
        if raw in (status.value, str(status.label).lower()):
            return status
    raise InvalidTransition(f"Unknown sale status '{value}'")


def can_transition(*, from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, sale: Sale, target_status: str):
    if not can_transition(from_status=sale.status, to_status=target_status):
        raise InvalidTransition(
            f"Sale {sale.id} cannot transition from "
            f"'{sale.status}' to '{target_status}'"
        )


def cancellable_quantities(sale: Sale) -> list[tuple]:
    """
    (product_id, qty) still owed back to stock when a completed sale is
    cancelled.

    SaleItem.qty is already net of completed returns. Returns that restored
    stock at approval without completing (still approved, or rejected) have
    not reduced SaleItem.qty, so their units are subtracted here.
    """
    restored_elsewhere = Q(return_items__sale_return__stock_restoration="stock_restored") & ~Q(
        return_items__sale_return__status="completed"
    )
    rows = sale.items.annotate(
        restored=Coalesce(Sum("return_items__qty_returned", filter=restored_elsewhere), 0)
    ).values_list("product_id", "qty", "restored")
    return [(product_id, max(0, qty - restored)) for product_id, qty, restored in rows]


# ============================================================
# MANAGER
# ============================================================


@dataclass(frozen=True)
class SaleTransitionResult:
    sale: Sale
    stock_adjustment: str
    transition: str


class SaleLifecycleManager:
    def __init__(self, recalculator: StockAlertRecalculator) -> None:
        self.recalculator = recalculator

    def _load_for_update(self, sale_id) -> Sale:
        try:
            return Sale.objects.select_for_update().get(pk=sale_id)
        except (Sale.DoesNotExist, ValidationError, ValueError):
            raise NotFound(f"Sale {sale_id} not found")

    def transition(self, sale_id, target_status) -> SaleTransitionResult:
        target = parse_sale_status(target_status)
        sale = self._load_for_update(sale_id)

        prev = SaleStatus(sale.status)
        validate_transition(sale=sale, target_status=target)

        transition = f"{prev.value} -> {target.value}"

        if prev == target:
            return SaleTransitionResult(
                sale=sale,
                stock_adjustment=NO_ADJUSTMENT,
                transition=transition,
            )

        was_completed = prev == SaleStatus.COMPLETED
        will_be_completed = target == SaleStatus.COMPLETED
        will_be_cancelled = target == SaleStatus.CANCELLED

        adjustment = NO_ADJUSTMENT
        levels = []

        if not was_completed and will_be_completed:
            quantities = group_quantities(sale.items.values_list("product_id", "qty"))
            levels = decrement_stock(quantities)
            adjustment = STOCK_DECREMENTED

        elif was_completed and will_be_cancelled:
            quantities = group_quantities(cancellable_quantities(sale))
            levels = increment_stock(quantities)
            adjustment = STOCK_RESTORED

        if levels:
            self.recalculator.recalculate(levels)

        sale.status = target
        sale.save(update_fields=["status"])

        logger.info(
            "Sale status changed",
            extra={
                "sale_id": str(sale.id),
                "transition": transition,
                "stock_adjustment": adjustment,
                "products": len(levels),
            },
        )

        return SaleTransitionResult(
            sale=sale,
            stock_adjustment=adjustment,
            transition=transition,
        )
