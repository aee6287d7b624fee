"""
darkpool_kernel.domain.types -- Frozen DTOs and status enums for the pool.

ZERO I/O.  Models convert to these via ``to_dto()``; services and selectors
return them instead of ORM instances.

Status machines (one-way, no reversals):
    Transaction:  pending -> selected -> executed | failed
    Batch:        pending -> executing -> completed
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


# =============================================================================
# Status enums
# =============================================================================


class TransactionStatus(str, Enum):
    """Lifecycle status of a private transaction."""

    PENDING = "pending"  # Submitted, eligible for the next cycle
    SELECTED = "selected"  # Claimed by a batch, dispatch not yet recorded
    EXECUTED = "executed"  # Target returned a response (any HTTP status)
    FAILED = "failed"  # No response obtained (transport, timeout, bad body)


class BatchStatus(str, Enum):
    """Lifecycle status of an execution batch. There is no failed state."""

    PENDING = "pending"
    EXECUTING = "executing"  # Members still dispatching
    COMPLETED = "completed"  # Every member has a result row


# =============================================================================
# Validation
# =============================================================================


@dataclass(frozen=True)
class FieldError:
    """A single submission validation failure."""

    code: str
    message: str
    field: str | None = None


# =============================================================================
# Entity DTOs
# =============================================================================


@dataclass(frozen=True)
class PrivateTransaction:
    """Immutable snapshot of a queued transaction."""

    transaction_id: UUID
    agent_id: str
    target_endpoint: str
    request_payload: str  # Serialized JSON, opaque to the pool
    payment_amount: Decimal
    privacy_fee: Decimal
    status: TransactionStatus
    batch_id: UUID | None = None
    created_at: datetime | None = None
    executed_at: datetime | None = None


@dataclass(frozen=True)
class ExecutionBatch:
    """Immutable snapshot of a batch.

    ``transaction_count`` and ``total_value`` are fixed when the batch is
    created from the claimed set.
    """

    batch_id: UUID
    transaction_count: int
    total_value: Decimal
    status: BatchStatus
    created_at: datetime | None = None
    executed_at: datetime | None = None


@dataclass(frozen=True)
class TransactionResult:
    """Outcome row for one dispatched transaction."""

    transaction_id: UUID
    batch_id: UUID
    success: bool
    response_data: str | None = None  # Serialized JSON body when a response was obtained
    error_message: str | None = None  # Present when no response was obtained
    status_code: int | None = None
    executed_at: datetime | None = None


@dataclass(frozen=True)
class PoolStats:
    """Daily rollup keyed by UTC calendar date."""

    date: date
    total_transactions: int = 0
    total_volume: Decimal = Decimal("0")
    total_fees: Decimal = Decimal("0")
    avg_batch_size: Decimal = Decimal("0")
    mev_attacks_prevented: int = 0


# =============================================================================
# Intake / query results
# =============================================================================


@dataclass(frozen=True)
class SubmissionReceipt:
    """Returned to the caller after a successful submission."""

    transaction_id: UUID
    status: TransactionStatus
    privacy_fee: Decimal
    total_cost: Decimal
    estimated_execution_seconds: int


@dataclass(frozen=True)
class TransactionStatusView:
    """A transaction joined with its result row, if any."""

    transaction: PrivateTransaction
    result: TransactionResult | None = None

    @property
    def result_payload(self) -> Any:
        """Decoded response body, only for successful dispatches."""
        if self.result is None or not self.result.success:
            return None
        return json.loads(self.result.response_data or "{}")

    @property
    def error(self) -> str | None:
        return self.result.error_message if self.result else None


@dataclass(frozen=True)
class BatchMember:
    transaction_id: UUID
    status: TransactionStatus
    executed_at: datetime | None = None


@dataclass(frozen=True)
class BatchView:
    batch: ExecutionBatch
    members: tuple[BatchMember, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PoolStatsView:
    """Today's rollup plus the live pending count."""

    today: PoolStats
    pending_transactions: int
