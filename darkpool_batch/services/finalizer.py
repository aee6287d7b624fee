"""
BatchFinalizer -- complete batches whose members are all recorded.

Contract:
    ``finalize()`` moves one batch to ``completed`` with an execution
    timestamp, but only once a result row exists for every member.
    ``reconcile_open_batches()`` sweeps every batch left open by an
    interrupted cycle and finalizes those that are eligible.

Invariants enforced:
    - A batch is never ``completed`` while a member lacks a result.
    - Completion happens at most once; re-finalizing is a no-op.

Non-goals:
    - Does NOT re-dispatch members left ``selected`` by a crash.  Those
      batches stay open and are reported on every sweep.
    - Does NOT call ``session.commit()``.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from darkpool_kernel.domain.clock import Clock, SystemClock
from darkpool_kernel.domain.types import BatchStatus, ExecutionBatch
from darkpool_kernel.exceptions import BatchNotFoundError
from darkpool_kernel.logging_config import get_logger
from darkpool_kernel.models.batch import ExecutionBatchModel
from darkpool_kernel.models.transaction import TransactionResultModel

logger = get_logger("batch.finalizer")

_OPEN_STATUSES = (BatchStatus.PENDING.value, BatchStatus.EXECUTING.value)


class BatchFinalizer:

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()

    def finalize(self, session: Session, batch_id: UUID) -> ExecutionBatch | None:
        """Complete the batch if every member has a result.

        Returns the completed batch, or None if it was already completed or
        still has members without a result.

        Raises:
            BatchNotFoundError: If the batch does not exist.
        """
        model = session.execute(
            select(ExecutionBatchModel)
            .where(ExecutionBatchModel.id == batch_id)
            .with_for_update()
        ).scalar_one_or_none()
        if model is None:
            raise BatchNotFoundError(str(batch_id))

        if model.status == BatchStatus.COMPLETED.value:
            return None

        recorded = self._count_results(session, batch_id)
        if recorded < model.transaction_count:
            logger.warning(
                "batch_finalize_deferred",
                extra={
                    "batch_id": str(batch_id),
                    "recorded": recorded,
                    "transaction_count": model.transaction_count,
                },
            )
            return None

        model.status = BatchStatus.COMPLETED.value
        model.executed_at = self._clock.now()
        session.flush()

        logger.info(
            "batch_completed",
            extra={
                "batch_id": str(batch_id),
                "transaction_count": model.transaction_count,
                "total_value": model.total_value,
            },
        )
        return model.to_dto()

    def reconcile_open_batches(self, session: Session) -> tuple[ExecutionBatch, ...]:
        """Finalize every open batch that is now eligible.

        Batches that still have unrecorded members are logged as
        ``batch_reconcile_incomplete`` and left open.
        """
        open_ids = session.execute(
            select(ExecutionBatchModel.id)
            .where(ExecutionBatchModel.status.in_(_OPEN_STATUSES))
            .order_by(ExecutionBatchModel.created_at, ExecutionBatchModel.id)
        ).scalars().all()

        finalized = []
        for batch_id in open_ids:
            batch = self.finalize(session, batch_id)
            if batch is not None:
                finalized.append(batch)
            else:
                logger.warning(
                    "batch_reconcile_incomplete",
                    extra={"batch_id": str(batch_id)},
                )

        if open_ids:
            logger.info(
                "batch_reconcile_finished",
                extra={"open": len(open_ids), "finalized": len(finalized)},
            )
        return tuple(finalized)

    @staticmethod
    def _count_results(session: Session, batch_id: UUID) -> int:
        return session.execute(
            select(func.count())
            .select_from(TransactionResultModel)
            .where(TransactionResultModel.batch_id == batch_id)
        ).scalar_one()
