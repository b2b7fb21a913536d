# core/exceptions.py

"""
LIFECYCLE ERRORS

Centralized domain errors for the order/return lifecycle.

Every error carries:
- code:        stable machine-readable identifier (API payloads)
- http_status: status the HTTP layer maps it to

Errors raised inside a UnitOfWork abort the transaction, so no partial
stock/total mutation ever escapes.
"""

from __future__ import annotations


class LifecycleError(Exception):
    """Base exception for all lifecycle failures."""

    code: str = "lifecycle_error"
    http_status: int = 400

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "An unspecified lifecycle error occurred."
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class NotFound(LifecycleError):
    """Sale, return, sale item or product does not exist."""

    code = "not_found"
    http_status = 404


class InvalidPrecondition(LifecycleError):
    """The target entity is not in a state that allows the operation."""

    code = "invalid_precondition"
    http_status = 400


class InvalidTransition(LifecycleError):
    """Unknown target status, or the current status is terminal."""

    code = "invalid_transition"
    http_status = 409


class InsufficientQuantity(LifecycleError):
    """
    A return line asks for more units than are still returnable.

    Carries the numbers so API clients can show the exact shortfall.
    """

    code = "insufficient_quantity"
    http_status = 400

    def __init__(
        self,
        message: str | None = None,
        *,
        product_name: str = "",
        available: int = 0,
        requested: int = 0,
    ) -> None:
        super().__init__(message)
        self.product_name = product_name
        self.available = int(available)
        self.requested = int(requested)

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - self.available)


class TransientStoreFailure(LifecycleError):
    """
    Connection exhaustion, lock/statement timeout, or an admission wait that
    expired. Not retried here; callers may retry.
    """

    code = "transient_store_failure"
    http_status = 503


class AdmissionTimeout(TransientStoreFailure):
    """No admission slot became available within the configured wait."""

    code = "admission_timeout"
