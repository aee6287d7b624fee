"""
BatchSelector -- FIFO selection and atomic claim of pending transactions.

Contract:
    ``select_and_claim()`` picks up to ``max_batch_size`` pending
    transactions in (created_at, id) order, moves them to ``selected`` under
    a fresh batch id, and inserts the batch row in ``executing`` state.

Invariants enforced:
    - Claim exclusivity: the claim is one conditional UPDATE restricted to
      rows whose status is still ``pending``.  A row claimed by a concurrent
      cycle between the read and the update is simply not included.
    - Batch size bound: never more than ``max_batch_size`` members.
    - All timestamps from the injected Clock.

Non-goals:
    - Does NOT call ``session.commit()`` -- the cycle commits the claim.
"""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from darkpool_kernel.db.types import sum_money
from darkpool_kernel.domain.clock import Clock, SystemClock
from darkpool_kernel.domain.types import (
    BatchStatus,
    ExecutionBatch,
    TransactionStatus,
)
from darkpool_kernel.logging_config import get_logger
from darkpool_kernel.models.batch import ExecutionBatchModel
from darkpool_kernel.models.transaction import PrivateTransactionModel

from darkpool_batch.domain.types import ClaimedBatch

logger = get_logger("batch.selector")


class BatchSelector:
    """Forms batches from the pending queue."""

    def __init__(self, max_batch_size: int, clock: Clock | None = None):
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")
        self._max_batch_size = max_batch_size
        self._clock = clock or SystemClock()

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    def select_and_claim(self, session: Session) -> ClaimedBatch | None:
        """Claim the oldest pending transactions into a new batch.

        Returns None (and creates nothing) when no pending transaction
        could be claimed.
        """
        candidate_ids = session.execute(
            select(PrivateTransactionModel.id)
            .where(PrivateTransactionModel.status == TransactionStatus.PENDING.value)
            .order_by(
                PrivateTransactionModel.created_at,
                PrivateTransactionModel.id,
            )
            .limit(self._max_batch_size)
        ).scalars().all()

        if not candidate_ids:
            logger.info("no_pending_transactions")
            return None

        batch_id = uuid4()
        session.execute(
            update(PrivateTransactionModel)
            .where(
                PrivateTransactionModel.id.in_(candidate_ids),
                PrivateTransactionModel.status == TransactionStatus.PENDING.value,
            )
            .values(
                status=TransactionStatus.SELECTED.value,
                batch_id=batch_id,
            )
            .execution_options(synchronize_session=False)
        )

        claimed = session.execute(
            select(PrivateTransactionModel)
            .where(
                PrivateTransactionModel.batch_id == batch_id,
                PrivateTransactionModel.status == TransactionStatus.SELECTED.value,
            )
            .order_by(
                PrivateTransactionModel.created_at,
                PrivateTransactionModel.id,
            )
            .execution_options(populate_existing=True)
        ).scalars().all()

        if not claimed:
            logger.info(
                "claim_lost_to_concurrent_cycle",
                extra={"candidates": len(candidate_ids)},
            )
            return None

        members = tuple(m.to_dto() for m in claimed)
        batch = ExecutionBatch(
            batch_id=batch_id,
            transaction_count=len(members),
            total_value=sum_money(m.payment_amount for m in members),
            status=BatchStatus.EXECUTING,
            created_at=self._clock.now(),
        )
        session.add(ExecutionBatchModel.from_dto(batch))
        session.flush()

        if len(members) < len(candidate_ids):
            logger.info(
                "claim_partially_lost",
                extra={
                    "batch_id": str(batch_id),
                    "candidates": len(candidate_ids),
                    "claimed": len(members),
                },
            )

        logger.info(
            "batch_created",
            extra={
                "batch_id": str(batch_id),
                "transaction_count": batch.transaction_count,
                "total_value": batch.total_value,
            },
        )
        return ClaimedBatch(batch=batch, members=members)
