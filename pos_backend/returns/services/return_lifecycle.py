# returns/services/return_lifecycle.py

"""
======================================================
PATH: returns/services/return_lifecycle.py
======================================================
RETURN LIFECYCLE MANAGER

Purpose:
- Create returns against COMPLETED sales with strict per-item quantity
  ceilings.
- Apply return status transitions with their stock / sale side effects.

Creation:
- Sale must exist and be COMPLETED.
- Each line's SaleItem must belong to the sale and match the product.
- available = sale_item.qty minus the qty held by still-open
  (pending/approved) returns, by rejected returns whose stock was restored
  at approval, and by earlier lines of the same request.
  (sale_item.qty is already net of COMPLETED returns.)
- refund_amount = price * qty_returned, frozen at creation.
- No stock or sale mutation at creation.

Transitions (current status must NOT be terminal):
- -> completed : reduce SaleItem.qty (floored at 0), add total_refund to
                 Sale.total_returned (adjusted_total follows), restore stock
                 unless it was already restored at approval, stamp
                 processed_at.
- -> approved  : with restore_stock (default true) restore stock ONCE;
                 the sale is not touched.
- -> rejected  : status only. Stock restored at approval stays restored and
                 the quantity stays claimed.

Stock-effecting transitions require the sale to still be COMPLETED.

The manager never opens its own transaction; it must run inside a
UnitOfWork (see core.engine.LifecycleEngine).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db.models import Q, Sum
from django.utils import timezone

from alerts.services.stock_alerts import StockAlertRecalculator
from core.exceptions import (
    InsufficientQuantity,
    InvalidPrecondition,
    InvalidTransition,
    NotFound,
)
from products.services.inventory import group_quantities, increment_stock
from returns.models import (
    Return,
    ReturnItem,
    ReturnStatus,
    StockRestoration,
    TERMINAL_RETURN_STATUSES,
)
from sales.models import Sale, SaleItem, SaleStatus

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

OPEN_RETURN_STATUSES = (ReturnStatus.PENDING, ReturnStatus.APPROVED)

# Quantity still claimed by a non-completed return: open ones, plus rejected
# ones whose stock already went back on the shelf at approval.
HELD_RETURN_ITEMS = Q(sale_return__status__in=OPEN_RETURN_STATUSES) | Q(
    sale_return__status=ReturnStatus.REJECTED,
    sale_return__stock_restoration=StockRestoration.STOCK_RESTORED,
)

# Any non-terminal status may move to any status; terminal ones go nowhere.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    status: (set() if status in TERMINAL_RETURN_STATUSES else set(ReturnStatus.values))
    for status in ReturnStatus.values
}

SALE_UPDATED = "sale_updated"
STOCK_RESTORED = "stock_restored"
NO_ADJUSTMENT = "none"


def parse_return_status(value) -> ReturnStatus:
    raw = str(value or "").strip().lower()
    for status in ReturnStatus:
        if raw in (status.value, str(status.label).lower()):
            return status
    raise InvalidTransition(f"Unknown return status '{value}'")


@dataclass(frozen=True)
class ReturnTransitionResult:
    sale_return: Return
    sale_adjustment: str
    stock_adjustment: str
    transition: str


class ReturnLifecycleManager:
    def __init__(self, recalculator: StockAlertRecalculator) -> None:
        self.recalculator = recalculator

    # --------------------------------------------------
    # LOADING
    # --------------------------------------------------

    def _lock_sale(self, sale_id) -> Sale:
        try:
            return Sale.objects.select_for_update().get(pk=sale_id)
        except (Sale.DoesNotExist, ValidationError, ValueError):
            raise NotFound(f"Sale {sale_id} not found")

    def _lock_return(self, return_id) -> Return:
        try:
            return Return.objects.select_for_update().get(pk=return_id)
        except (Return.DoesNotExist, ValidationError, ValueError):
            raise NotFound(f"Return {return_id} not found")

    def _require_completed_sale(self, sale: Sale) -> None:
        if sale.status != SaleStatus.COMPLETED:
            raise InvalidPrecondition(
                "Returns can only be processed for completed sales. "
                f"Current sale status: {sale.status}"
            )

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------

    def _returned_qty_by_item(self, sale_item_ids, condition: Q) -> dict[str, int]:
        rows = (
            ReturnItem.objects.filter(condition, sale_item_id__in=sale_item_ids)
            .values("sale_item_id")
            .annotate(total=Sum("qty_returned"))
        )
        return {str(r["sale_item_id"]): int(r["total"] or 0) for r in rows}

    def create(
        self,
        *,
        sale_id,
        items: list[dict],
        reason: str = "",
        notes: str = "",
    ) -> Return:
        """
        items: [{sale_item_id, product_id?, qty_returned, reason?}, ...]
        """
        sale = self._lock_sale(sale_id)
        self._require_completed_sale(sale)

        if not items:
            raise InvalidPrecondition("A return requires at least one item.")

        sale_items = {
            str(si.id): si for si in sale.items.select_related("product")
        }

        open_qty = self._returned_qty_by_item(list(sale_items), HELD_RETURN_ITEMS)
        completed_qty = self._returned_qty_by_item(
            list(sale_items), Q(sale_return__status=ReturnStatus.COMPLETED)
        )

        requested: dict[str, int] = defaultdict(int)
        lines: list[ReturnItem] = []
        total_refund = Decimal("0.00")

        for n, line in enumerate(items, start=1):
            sid = str(line.get("sale_item_id") or "").strip()
            qty = int(line.get("qty_returned") or 0)

            if not sid or qty <= 0:
                raise InvalidPrecondition(
                    "Each item requires sale_item_id and qty_returned > 0."
                )

            si = sale_items.get(sid)
            if si is None:
                raise NotFound(f"Sale item {sid} not found in sale {sale.id}")

            product_id = line.get("product_id")
            if product_id not in (None, "") and str(product_id) != str(si.product_id):
                raise InvalidPrecondition(f"Product mismatch for sale item {sid}")

            held = open_qty.get(sid, 0) + requested[sid]
            available = int(si.qty) - held

            if qty > available:
                already = completed_qty.get(sid, 0) + held
                sold = int(si.qty) + completed_qty.get(sid, 0)
                raise InsufficientQuantity(
                    f"{si.product.name}: only {max(available, 0)} units can be returned "
                    f"(sold: {sold}, already returned: {already}, requested: {qty}, "
                    f"short by {qty - max(available, 0)})",
                    product_name=si.product.name,
                    available=max(available, 0),
                    requested=qty,
                )

            requested[sid] += qty

            refund = (Decimal(si.price) * qty).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
            total_refund += refund

            lines.append(
                ReturnItem(
                    line_no=n,
                    sale_item=si,
                    product_id=si.product_id,
                    qty_returned=qty,
                    refund_amount=refund,
                    reason=(line.get("reason") or "").strip(),
                )
            )

        sale_return = Return.objects.create(
            sale=sale,
            status=ReturnStatus.PENDING,
            reason=(reason or "").strip(),
            notes=(notes or "").strip(),
            total_refund=total_refund,
            items_count=len(lines),
        )
        for row in lines:
            row.sale_return = sale_return
        ReturnItem.objects.bulk_create(lines)

        logger.info(
            "Return created",
            extra={
                "return_id": str(sale_return.id),
                "sale_id": str(sale.id),
                "items": len(lines),
                "total_refund": str(total_refund),
            },
        )

        return sale_return

    # --------------------------------------------------
    # SIDE EFFECTS
    # --------------------------------------------------

    def _restore_stock(self, sale_return: Return, items: list[ReturnItem]) -> None:
        quantities = group_quantities((it.product_id, it.qty_returned) for it in items)
        levels = increment_stock(quantities)
        self.recalculator.recalculate(levels)
        sale_return.stock_restoration = StockRestoration.STOCK_RESTORED

    def _apply_to_sale(self, sale: Sale, sale_return: Return, items: list[ReturnItem]) -> None:
        per_item: dict[str, int] = defaultdict(int)
        for it in items:
            per_item[str(it.sale_item_id)] += int(it.qty_returned)

        sale_items = list(
            SaleItem.objects.select_for_update().filter(pk__in=list(per_item.keys()))
        )
        for si in sale_items:
            before = int(si.qty)
            si.qty = max(0, before - per_item[str(si.id)])
            logger.info(
                "Sale item quantity reduced",
                extra={"sale_item_id": str(si.id), "from": before, "to": si.qty},
            )
        SaleItem.objects.bulk_update(sale_items, ["qty"])

        sale.total_returned = Decimal(sale.total_returned or 0) + Decimal(sale_return.total_refund)
        sale.save(update_fields=["total_returned"])

    # --------------------------------------------------
    # TRANSITION
    # --------------------------------------------------

    def update_status(
        self,
        *,
        return_id,
        target_status,
        restore_stock: bool | None = None,
        user=None,
    ) -> ReturnTransitionResult:
        target = parse_return_status(target_status)
        sale_return = self._lock_return(return_id)
        prev = ReturnStatus(sale_return.status)

        if prev in TERMINAL_RETURN_STATUSES:
            raise InvalidTransition(
                f"Return {sale_return.id} is {prev.value}; its status can no longer change"
            )
        if target not in ALLOWED_TRANSITIONS[prev]:
            raise InvalidTransition(
                f"Return {sale_return.id} cannot transition from '{prev}' to '{target}'"
            )

        transition = f"{prev.value} -> {target.value}"
        items = list(sale_return.items.all())

        sale_adjustment = NO_ADJUSTMENT
        stock_adjustment = NO_ADJUSTMENT
        update_fields = ["status"]

        if target == ReturnStatus.COMPLETED:
            sale = self._lock_sale(sale_return.sale_id)
            self._require_completed_sale(sale)

            self._apply_to_sale(sale, sale_return, items)
            sale_adjustment = SALE_UPDATED

            if not sale_return.stock_already_restored:
                self._restore_stock(sale_return, items)
                stock_adjustment = STOCK_RESTORED

        elif target == ReturnStatus.APPROVED:
            should_restore = True if restore_stock is None else bool(restore_stock)

            if should_restore and not sale_return.stock_already_restored:
                sale = self._lock_sale(sale_return.sale_id)
                self._require_completed_sale(sale)

                self._restore_stock(sale_return, items)
                stock_adjustment = STOCK_RESTORED
            elif not should_restore:
                logger.info(
                    "Return approved without stock restoration",
                    extra={"return_id": str(sale_return.id)},
                )

        if sale_adjustment != NO_ADJUSTMENT or stock_adjustment != NO_ADJUSTMENT:
            sale_return.processed_at = timezone.now()
            update_fields += ["processed_at", "stock_restoration"]
            if getattr(user, "is_authenticated", False):
                sale_return.processed_by = user
                update_fields.append("processed_by")

        sale_return.status = target
        sale_return.save(update_fields=update_fields)

        logger.info(
            "Return status changed",
            extra={
                "return_id": str(sale_return.id),
                "transition": transition,
                "sale_adjustment": sale_adjustment,
                "stock_adjustment": stock_adjustment,
            },
        )

        return ReturnTransitionResult(
            sale_return=sale_return,
            sale_adjustment=sale_adjustment,
            stock_adjustment=stock_adjustment,
            transition=transition,
        )
