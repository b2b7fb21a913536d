# core/unit_of_work.py

"""
UNIT OF WORK (TRANSACTION BOUNDARY)

Wraps each lifecycle transition in ONE atomic transaction so that:
- status change
- stock mutation
- sale totals / item quantities
- stock alert recomputation
either all apply or none do.

Timeouts:
- Connection wait: bounded by the connection pool (`DB_POOL_TIMEOUT` in prod
  settings); exhaustion surfaces as OperationalError, a dropped
  connection as InterfaceError.
- Execution: `SET LOCAL statement_timeout` / `lock_timeout` on PostgreSQL.
  Other vendors run without a server-side execution bound.

Both kinds of timeout are mapped to TransientStoreFailure. Domain errors
raised inside the block propagate unchanged after the rollback.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from django.db import (
    DEFAULT_DB_ALIAS,
    InterfaceError,
    OperationalError,
    connections,
    transaction,
)

from .exceptions import TransientStoreFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STATEMENT_TIMEOUT_MS = 15000


class UnitOfWork:
    def __init__(
        self,
        *,
        using: str = DEFAULT_DB_ALIAS,
        statement_timeout_ms: int | None = DEFAULT_STATEMENT_TIMEOUT_MS,
    ) -> None:
        self.using = using
        self.statement_timeout_ms = statement_timeout_ms

    @property
    def connection(self):
        return connections[self.using]

    def _apply_execution_timeout(self) -> None:
        if not self.statement_timeout_ms:
            return
        if self.connection.vendor != "postgresql":
            return

        timeout = f"{int(self.statement_timeout_ms)}ms"
        with self.connection.cursor() as cursor:
            # SET LOCAL cannot be parameterized; set_config(..., true) is the
            # transaction-scoped equivalent.
            cursor.execute("SELECT set_config('statement_timeout', %s, true)", [timeout])
            cursor.execute("SELECT set_config('lock_timeout', %s, true)", [timeout])

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            with transaction.atomic(using=self.using):
                self._apply_execution_timeout()
                yield
        except (OperationalError, InterfaceError) as exc:
            logger.warning(
                "Transaction aborted by the store",
                extra={"db_alias": self.using, "error": str(exc)},
            )
            raise TransientStoreFailure(
                f"The store could not complete the transaction: {exc}"
            ) from exc

    def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with self.atomic():
            return fn(*args, **kwargs)

    def close(self) -> None:
        """Release this thread's connection for the configured alias."""
        self.connection.close()
