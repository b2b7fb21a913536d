# core/admission.py

"""
ADMISSION CONTROLLER

Bounded-concurrency gate for lifecycle transactions.

- A counting semaphore with a FIFO wait queue.
- At most `max_concurrent` critical sections run at once; later callers block
  in arrival order.
- On completion (success OR failure) the slot is handed directly to the
  oldest waiter, so a newcomer can never overtake a queued caller.

Scope:
- Bounds GLOBAL throughput only.
- Does NOT provide per-sale or per-product mutual exclusion.

Example
-------
>>> gate = AdmissionController(max_concurrent=5)
>>> gate.run(engine_call, sale_id, "completed")
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, TypeVar

from .exceptions import AdmissionTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_CONCURRENT = 5


@dataclass(frozen=True)
class AdmissionStats:
    running: int
    queued: int
    max_concurrent: int

    def as_dict(self) -> dict[str, int]:
        return {
            "running": self.running,
            "queued": self.queued,
            "max_concurrent": self.max_concurrent,
        }


class AdmissionController:
    def __init__(
        self,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        *,
        timeout: float | None = None,
        name: str = "lifecycle",
    ) -> None:
        """
        Parameters
        ----------
        max_concurrent : int
            Number of critical sections allowed in flight. Must be >= 1.

        timeout : float | None
            Default maximum wait (seconds) for a slot.
            - None: wait indefinitely.
            - float: raise AdmissionTimeout once exceeded.

        name : str
            Label used in log records.
        """
        max_concurrent = int(max_concurrent)
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")

        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self.name = name

        self._mutex = threading.Lock()
        self._running = 0
        self._waiters: deque[threading.Event] = deque()

    # --------------------------------------------------
    # SLOT MANAGEMENT
    # --------------------------------------------------

    def _acquire(self, timeout: float | None) -> None:
        with self._mutex:
            if self._running < self.max_concurrent and not self._waiters:
                self._running += 1
                return

            ticket = threading.Event()
            self._waiters.append(ticket)
            queued = len(self._waiters)

        logger.debug(
            "Admission wait",
            extra={"gate": self.name, "queued": queued},
        )

        if ticket.wait(timeout):
            return

        with self._mutex:
            # The slot may have been handed over between the wait expiring
            # and taking the mutex; in that case we own it.
            if ticket.is_set():
                return
            self._waiters.remove(ticket)

        raise AdmissionTimeout(
            f"No '{self.name}' admission slot became available within {timeout}s"
        )

    def _release(self) -> None:
        with self._mutex:
            if self._waiters:
                # Hand-off: the running count stays the same, ownership moves.
                self._waiters.popleft().set()
                return
            self._running -= 1

    @contextmanager
    def slot(self, timeout: float | None = None) -> Iterator[None]:
        """
        Hold one admission slot for the duration of the block.

        Raises
        ------
        AdmissionTimeout
            If no slot is granted within the timeout.
        """
        effective = self.timeout if timeout is None else timeout
        started = time.monotonic()

        self._acquire(effective)

        waited = time.monotonic() - started
        if waited > 0.5:
            logger.info(
                "Admission granted after wait",
                extra={"gate": self.name, "waited_s": round(waited, 3)},
            )

        try:
            yield
        finally:
            self._release()

    def run(self, critical_section: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Execute `critical_section(*args, **kwargs)` once a slot is granted and
        return its result. Exceptions propagate after the slot is released.
        """
        with self.slot():
            return critical_section(*args, **kwargs)

    # --------------------------------------------------
    # OBSERVABILITY
    # --------------------------------------------------

    def stats(self) -> AdmissionStats:
        with self._mutex:
            return AdmissionStats(
                running=self._running,
                queued=len(self._waiters),
                max_concurrent=self.max_concurrent,
            )
