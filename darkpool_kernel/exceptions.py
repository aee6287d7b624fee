"""
Typed exception hierarchy for the dark pool.

Every error carries a ``code`` class attribute so callers (and the HTTP
layer) can branch on type and report a machine-readable identifier
instead of parsing messages.

    DarkPoolError (base)
    |
    +-- ValidationError               VALIDATION_ERROR
    |
    +-- NotFoundError                 NOT_FOUND
    |   +-- TransactionNotFoundError  TRANSACTION_NOT_FOUND
    |   +-- BatchNotFoundError        BATCH_NOT_FOUND
    |
    +-- DispatchError                 DISPATCH_ERROR
    |   +-- DispatchTimeoutError      DISPATCH_TIMEOUT
    |
    +-- PersistenceError              PERSISTENCE_ERROR
    |   +-- StatsUpdateError          STATS_UPDATE_ERROR
    |
    +-- ConfigurationError            CONFIGURATION_ERROR

Propagation:
    ValidationError, NotFoundError and PersistenceError surface to the
    caller on the intake and query paths.  DispatchError never leaves the
    batch cycle; it is captured per member and recorded as a failed
    result.  StatsUpdateError is logged by the cycle and never undoes a
    committed batch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from darkpool_kernel.domain.types import FieldError


class DarkPoolError(Exception):
    """Base exception for all dark pool errors."""

    code: str = "DARK_POOL_ERROR"


class ValidationError(DarkPoolError):
    """A submission was malformed. Nothing was persisted."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, errors: tuple[FieldError, ...] | list[FieldError]):
        self.errors = tuple(errors)
        message = "; ".join(e.message for e in self.errors) or "Invalid request"
        super().__init__(message)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(e.field for e in self.errors if e.field)


class NotFoundError(DarkPoolError):
    """Lookup target does not exist."""

    code: str = "NOT_FOUND"


class TransactionNotFoundError(NotFoundError):
    code: str = "TRANSACTION_NOT_FOUND"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class BatchNotFoundError(NotFoundError):
    code: str = "BATCH_NOT_FOUND"

    def __init__(self, batch_id: str):
        self.batch_id = batch_id
        super().__init__(f"Batch not found: {batch_id}")


class DispatchError(DarkPoolError):
    """The external target call produced no usable response."""

    code: str = "DISPATCH_ERROR"

    def __init__(self, target_endpoint: str, reason: str):
        self.target_endpoint = target_endpoint
        self.reason = reason
        super().__init__(f"Dispatch to {target_endpoint} failed: {reason}")


class DispatchTimeoutError(DispatchError):
    code: str = "DISPATCH_TIMEOUT"

    def __init__(self, target_endpoint: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            target_endpoint, f"no response within {timeout_seconds}s",
        )


class PersistenceError(DarkPoolError):
    """A storage operation failed."""

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage operation '{operation}' failed: {detail}")


class StatsUpdateError(PersistenceError):
    """Folding a batch into the daily rollup failed. Advisory only."""

    code: str = "STATS_UPDATE_ERROR"

    def __init__(self, batch_id: str, detail: str):
        self.batch_id = batch_id
        super().__init__("pool_stats_fold", detail)


class ConfigurationError(DarkPoolError):
    code: str = "CONFIGURATION_ERROR"

    def __init__(self, setting: str, value: object, reason: str):
        self.setting = setting
        self.value = value
        super().__init__(f"Invalid value for {setting}={value!r}: {reason}")
