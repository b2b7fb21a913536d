# alerts/services/stock_alerts.py

"""
======================================================
PATH: alerts/services/stock_alerts.py
======================================================
STOCK ALERT RECALCULATOR

Purpose:
- Given a batch of post-mutation stock levels, keep StockAlert rows true to
  the products' current stock vs. min_stock.

Flow (per batch):
1) Partition into healthy (stock >= min_stock) and unhealthy products.
2) Healthy: resolve every open alert in ONE update.
3) Unhealthy: derive severity, fetch open alerts for the batch in ONE query,
   refresh the most recent open alert per product, bulk-insert the rest.

Guarantees:
- Pure function of current state: safe to call repeatedly (alert CONTENT is
  idempotent; timestamps refresh).
- Runs inside the caller's transaction; errors propagate and roll back the
  whole lifecycle transition.

Reference rows (types/priorities/states) come from an explicit
AlertCatalogCache with a configurable TTL.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.utils import timezone

from alerts.models import AlertPriority, AlertState, AlertType, StockAlert
from core.exceptions import NotFound
from products.services.inventory import StockLevel

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_TTL = 60.0


# ============================================================
# CATALOG CACHE
# ============================================================


@dataclass(frozen=True)
class AlertCatalog:
    state_active: AlertState
    state_resolved: AlertState
    types: dict[str, AlertType]
    priorities: dict[str, AlertPriority]


class AlertCatalogCache:
    """
    Time-bounded cache of alert reference rows.

    The staleness window is `ttl` seconds; `clock` is injectable so tests can
    move time explicitly.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CATALOG_TTL,
        *,
        clock: Callable[[], float] = time.monotonic,
        using: str | None = None,
    ) -> None:
        self.ttl = float(ttl)
        self.using = using
        self._clock = clock
        self._lock = threading.Lock()
        self._catalog: AlertCatalog | None = None
        self._loaded_at: float | None = None
        self.loads = 0

    def _is_fresh(self, now: float) -> bool:
        return (
            self._catalog is not None
            and self._loaded_at is not None
            and (now - self._loaded_at) < self.ttl
        )

    def _load(self) -> AlertCatalog:
        def qs(model):
            return model.objects.using(self.using) if self.using else model.objects

        states = {s.code: s for s in qs(AlertState).all()}
        active = states.get(AlertState.ACTIVE)
        resolved = states.get(AlertState.RESOLVED)
        if active is None or resolved is None:
            raise ImproperlyConfigured(
                "Alert states 'active' and 'resolved' must exist. "
                "Run migrations to seed the alert catalog."
            )

        return AlertCatalog(
            state_active=active,
            state_resolved=resolved,
            types={t.code: t for t in qs(AlertType).all()},
            priorities={p.code: p for p in qs(AlertPriority).all()},
        )

    def get(self) -> AlertCatalog:
        now = self._clock()
        with self._lock:
            if self._is_fresh(now):
                return self._catalog

            self._catalog = self._load()
            self._loaded_at = now
            self.loads += 1
            return self._catalog

    def invalidate(self) -> None:
        with self._lock:
            self._catalog = None
            self._loaded_at = None


# ============================================================
# SEVERITY
# ============================================================


def classify_stock(stock: int, min_stock: int) -> tuple[str, str]:
    """
    Return (alert_type_code, priority_code) for an unhealthy product.

    - stock <= 0             -> out_of_stock / critical
    - stock/min_stock <= 0.25 -> low_stock / high
    - stock/min_stock <= 0.60 -> low_stock / medium
    - otherwise               -> low_stock / low
    """
    if stock <= 0:
        return AlertType.OUT_OF_STOCK, AlertPriority.CRITICAL

    ratio = (stock / min_stock) if min_stock > 0 else 0
    if ratio <= 0.25:
        priority = AlertPriority.HIGH
    elif ratio <= 0.6:
        priority = AlertPriority.MEDIUM
    else:
        priority = AlertPriority.LOW

    return AlertType.LOW_STOCK, priority


def _alert_text(stock: int, min_stock: int) -> tuple[str, str]:
    if stock <= 0:
        return "Out of stock", "The product has no stock left."
    return "Low stock", f"Stock below minimum ({stock}/{min_stock})."


# ============================================================
# RECALCULATOR
# ============================================================


@dataclass(frozen=True)
class AlertRecalcResult:
    resolved: int = 0
    updated: int = 0
    created: int = 0


class StockAlertRecalculator:
    def __init__(self, cache: AlertCatalogCache | None = None) -> None:
        self.cache = cache or AlertCatalogCache()

    def recalculate(self, levels: Iterable[StockLevel]) -> AlertRecalcResult:
        # Last level per product wins if a product appears twice.
        by_product = {lvl.product_id: lvl for lvl in levels}
        if not by_product:
            return AlertRecalcResult()

        catalog = self.cache.get()
        alerts = StockAlert.objects.using(self.cache.using) if self.cache.using else StockAlert.objects

        healthy_ids = []
        unhealthy: list[StockLevel] = []
        for lvl in by_product.values():
            if lvl.stock >= lvl.min_stock:
                healthy_ids.append(lvl.product_id)
            else:
                unhealthy.append(lvl)

        # --------------------------------------------------
        # 1. RESOLVE HEALTHY (one update)
        # --------------------------------------------------
        resolved = 0
        if healthy_ids:
            resolved = alerts.filter(
                product_id__in=healthy_ids,
                state=catalog.state_active,
                resolved=False,
            ).update(state=catalog.state_resolved, resolved=True)

        if not unhealthy:
            if resolved:
                logger.info("Stock alerts resolved", extra={"resolved": resolved})
            return AlertRecalcResult(resolved=resolved)

        # --------------------------------------------------
        # 2. EXISTING OPEN ALERTS (one query)
        # --------------------------------------------------
        existing: dict[object, object] = {}
        open_rows = (
            alerts.filter(
                product_id__in=[lvl.product_id for lvl in unhealthy],
                state=catalog.state_active,
                resolved=False,
            )
            .order_by("-timestamp")
            .values_list("id", "product_id")
        )
        for alert_id, product_id in open_rows:
            existing.setdefault(product_id, alert_id)

        # --------------------------------------------------
        # 3. UPDATE MOST RECENT / BULK INSERT NEW
        # --------------------------------------------------
        now = timezone.now()
        to_create: list[StockAlert] = []
        updated = 0

        for lvl in unhealthy:
            type_code, priority_code = classify_stock(lvl.stock, lvl.min_stock)
            title, message = _alert_text(lvl.stock, lvl.min_stock)

            alert_type = catalog.types.get(type_code)
            priority = catalog.priorities.get(priority_code)
            if alert_type is None or priority is None:
                raise ImproperlyConfigured(
                    f"Alert catalog is missing type '{type_code}' or priority '{priority_code}'."
                )

            data = {
                "type": alert_type,
                "priority": priority,
                "title": title,
                "message": message,
                "current_stock": lvl.stock,
                "min_stock": lvl.min_stock,
                "timestamp": now,
            }

            alert_id = existing.get(lvl.product_id)
            if alert_id is not None:
                updated += alerts.filter(pk=alert_id).update(**data)
            else:
                to_create.append(
                    StockAlert(
                        product_id=lvl.product_id,
                        state=catalog.state_active,
                        resolved=False,
                        **data,
                    )
                )

        if to_create:
            alerts.bulk_create(to_create)

        logger.info(
            "Stock alerts recalculated",
            extra={
                "resolved": resolved,
                "updated": updated,
                "created": len(to_create),
            },
        )

        return AlertRecalcResult(resolved=resolved, updated=updated, created=len(to_create))


# ============================================================
# MANUAL RESOLUTION
# ============================================================


def resolve_alert(alert_id, *, cache: AlertCatalogCache) -> StockAlert:
    """
    Mark one alert resolved by hand (staff acknowledged it).

    The next stock mutation of the product re-opens a fresh alert if the
    product is still below its minimum.
    """
    catalog = cache.get()
    alerts = StockAlert.objects.using(cache.using) if cache.using else StockAlert.objects

    try:
        alert = alerts.select_related("product", "type", "priority", "state").get(pk=alert_id)
    except (StockAlert.DoesNotExist, ValidationError, ValueError):
        raise NotFound(f"Alert {alert_id} not found")

    if not alert.resolved:
        alert.resolved = True
        alert.state = catalog.state_resolved
        alert.save(update_fields=["resolved", "state"])
        logger.info(
            "Stock alert resolved manually",
            extra={"alert_id": str(alert.id), "product_id": str(alert.product_id)},
        )

    return alert
