"""
darkpool_batch.domain.types -- Frozen DTOs exchanged inside a batch cycle.

ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from darkpool_kernel.db.types import sum_money
from darkpool_kernel.domain.types import (
    ExecutionBatch,
    PrivateTransaction,
    TransactionStatus,
)


@dataclass(frozen=True)
class ClaimedBatch:
    """A freshly created batch and the members it claimed, in FIFO order."""

    batch: ExecutionBatch
    members: tuple[PrivateTransaction, ...]

    @property
    def total_fees(self) -> Decimal:
        return sum_money(m.privacy_fee for m in self.members)


@dataclass(frozen=True)
class TargetResponse:
    """Decoded response from a target endpoint (any HTTP status)."""

    status_code: int
    ok: bool
    body: Any = None


@dataclass(frozen=True)
class DispatchOutcome:
    """What happened to one member.

    ``recorded`` is False when the transition could not be stored (the
    member stays ``selected`` and the batch cannot be finalized yet).
    """

    transaction_id: UUID
    status: TransactionStatus
    success: bool
    recorded: bool = True
    status_code: int | None = None
    error_message: str | None = None
    duration_ms: int = 0


@dataclass(frozen=True)
class CycleResult:
    """Summary of one run of the batch cycle."""

    cycle_id: str
    batch_id: UUID | None = None
    selected: int = 0
    executed: int = 0
    failed: int = 0
    succeeded: int = 0
    completed: bool = False
    stats_updated: bool = False
    skipped: bool = False
    error: str | None = None
    outcomes: tuple[DispatchOutcome, ...] = ()
    duration_ms: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "cycle_id": self.cycle_id,
            "batch_id": str(self.batch_id) if self.batch_id else None,
            "selected": self.selected,
            "executed": self.executed,
            "failed": self.failed,
            "succeeded": self.succeeded,
            "completed": self.completed,
            "stats_updated": self.stats_updated,
            "skipped": self.skipped,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }
