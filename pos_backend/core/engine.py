# core/engine.py

"""
======================================================
PATH: core/engine.py
======================================================
LIFECYCLE ENGINE (WIRING)

Single entry point for every stock-affecting lifecycle operation:

    admission slot -> UnitOfWork (one transaction) -> lifecycle manager

Every operation:
- waits for an admission slot (bounded global concurrency)
- runs in exactly ONE atomic transaction
- either fully applies (status + stock + sale totals + alerts) or rolls back

The process-wide engine is built lazily from settings.LIFECYCLE by
get_engine(); tests construct their own with explicit collaborators.
"""

from __future__ import annotations

import logging
import threading

from django.conf import settings

from alerts.services.stock_alerts import AlertCatalogCache, StockAlertRecalculator
from returns.services.return_lifecycle import ReturnLifecycleManager, ReturnTransitionResult
from sales.models import SaleStatus
from sales.services.checkout import create_sale
from sales.services.sale_lifecycle import (
    SaleLifecycleManager,
    SaleTransitionResult,
    parse_sale_status,
)

from .admission import AdmissionController
from .unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class LifecycleEngine:
    def __init__(
        self,
        *,
        admission: AdmissionController,
        unit_of_work: UnitOfWork,
        recalculator: StockAlertRecalculator,
    ) -> None:
        self.admission = admission
        self.unit_of_work = unit_of_work
        self.recalculator = recalculator
        self.sales = SaleLifecycleManager(recalculator)
        self.returns = ReturnLifecycleManager(recalculator)

    def _execute(self, fn, *args, **kwargs):
        return self.admission.run(self.unit_of_work.run, fn, *args, **kwargs)

    # --------------------------------------------------
    # SALES
    # --------------------------------------------------

    def transition_sale_status(self, sale_id, target_status) -> SaleTransitionResult:
        return self._execute(self.sales.transition, sale_id, target_status)

    def create_sale(self, *, status=SaleStatus.PENDING, **sale_data):
        """
        Create a sale and, when the requested initial status is not pending,
        move it there through the lifecycle manager in the SAME transaction.

        Returns (sale, transition_result_or_None).
        """
        target = parse_sale_status(status)

        def _create():
            sale = create_sale(**sale_data)
            if target == SaleStatus.PENDING:
                return sale, None
            result = self.sales.transition(sale.id, target)
            return result.sale, result

        return self._execute(_create)

    # --------------------------------------------------
    # RETURNS
    # --------------------------------------------------

    def create_return(self, sale_id, items, reason="", notes=""):
        return self._execute(
            self.returns.create,
            sale_id=sale_id,
            items=items,
            reason=reason,
            notes=notes,
        )

    def transition_return_status(
        self,
        return_id,
        target_status,
        restore_stock=None,
        user=None,
    ) -> ReturnTransitionResult:
        return self._execute(
            self.returns.update_status,
            return_id=return_id,
            target_status=target_status,
            restore_stock=restore_stock,
            user=user,
        )

    # --------------------------------------------------
    # OBSERVABILITY / SHUTDOWN
    # --------------------------------------------------

    def stats(self) -> dict:
        data = self.admission.stats().as_dict()
        data["alert_catalog_loads"] = self.recalculator.cache.loads
        return data

    def close(self) -> None:
        self.recalculator.cache.invalidate()
        self.unit_of_work.close()


# ============================================================
# PROCESS-WIDE ENGINE
# ============================================================

_engine: LifecycleEngine | None = None
_engine_lock = threading.Lock()


def build_default_engine() -> LifecycleEngine:
    config = getattr(settings, "LIFECYCLE", {})

    engine = LifecycleEngine(
        admission=AdmissionController(
            max_concurrent=config.get("MAX_CONCURRENT", 5),
            timeout=config.get("ADMISSION_TIMEOUT"),
        ),
        unit_of_work=UnitOfWork(
            statement_timeout_ms=config.get("STATEMENT_TIMEOUT_MS", 15000),
        ),
        recalculator=StockAlertRecalculator(
            AlertCatalogCache(ttl=config.get("ALERT_CATALOG_TTL", 60)),
        ),
    )

    logger.info(
        "Lifecycle engine configured",
        extra={
            "max_concurrent": engine.admission.max_concurrent,
            "admission_timeout": engine.admission.timeout,
            "statement_timeout_ms": engine.unit_of_work.statement_timeout_ms,
        },
    )
    return engine


def get_engine() -> LifecycleEngine:
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = build_default_engine()
        return _engine


def reset_engine() -> None:
    """Drop the process-wide engine (tests, settings overrides)."""
    global _engine
    with _engine_lock:
        _engine = None
