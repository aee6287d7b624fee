"""
Read-only lookups over the pool tables.

Backs the status, batch, and stats endpoints.  Nothing here participates
in mutation; repeated calls with no intervening writes return identical
results.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import func, select

from darkpool_kernel.domain.types import (
    BatchMember,
    BatchView,
    PoolStats,
    PoolStatsView,
    TransactionStatus,
    TransactionStatusView,
)
from darkpool_kernel.exceptions import BatchNotFoundError, TransactionNotFoundError
from darkpool_kernel.models.batch import ExecutionBatchModel
from darkpool_kernel.models.stats import PoolStatsModel
from darkpool_kernel.models.transaction import (
    PrivateTransactionModel,
    TransactionResultModel,
)
from darkpool_kernel.selectors.base import BaseSelector


def _coerce_uuid(value: UUID | str) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class PoolSelector(BaseSelector):
    """Status, batch, and rollup queries."""

    def get_transaction(self, transaction_id: UUID | str) -> TransactionStatusView:
        """Transaction joined with its result row, if dispatched.

        Raises:
            TransactionNotFoundError: unknown or malformed id.
        """
        tx_uuid = _coerce_uuid(transaction_id)
        if tx_uuid is None:
            raise TransactionNotFoundError(str(transaction_id))

        row = self.session.execute(
            select(PrivateTransactionModel, TransactionResultModel)
            .outerjoin(
                TransactionResultModel,
                TransactionResultModel.transaction_id == PrivateTransactionModel.id,
            )
            .where(PrivateTransactionModel.id == tx_uuid)
        ).first()

        if row is None:
            raise TransactionNotFoundError(str(transaction_id))

        tx_model, result_model = row
        return TransactionStatusView(
            transaction=tx_model.to_dto(),
            result=result_model.to_dto() if result_model is not None else None,
        )

    def get_batch(self, batch_id: UUID | str) -> BatchView:
        """Batch with its member summaries in submission order.

        Raises:
            BatchNotFoundError: unknown or malformed id.
        """
        batch_uuid = _coerce_uuid(batch_id)
        if batch_uuid is None:
            raise BatchNotFoundError(str(batch_id))

        batch_model = self.session.get(ExecutionBatchModel, batch_uuid)
        if batch_model is None:
            raise BatchNotFoundError(str(batch_id))

        members = self.session.execute(
            select(
                PrivateTransactionModel.id,
                PrivateTransactionModel.status,
                PrivateTransactionModel.executed_at,
            )
            .where(PrivateTransactionModel.batch_id == batch_uuid)
            .order_by(PrivateTransactionModel.created_at, PrivateTransactionModel.id)
        ).all()

        return BatchView(
            batch=batch_model.to_dto(),
            members=tuple(
                BatchMember(
                    transaction_id=m.id,
                    status=TransactionStatus(m.status),
                    executed_at=m.executed_at,
                )
                for m in members
            ),
        )

    def count_pending(self) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(PrivateTransactionModel)
            .where(PrivateTransactionModel.status == TransactionStatus.PENDING.value)
        ).scalar_one()

    def get_stats(self, on: date) -> PoolStats:
        """Rollup for ``on``; a zeroed rollup when no batch completed that day."""
        model = self.session.execute(
            select(PoolStatsModel).where(PoolStatsModel.date == on.isoformat())
        ).scalar_one_or_none()
        if model is None:
            return PoolStats(date=on)
        return model.to_dto()

    def get_stats_view(self, on: date) -> PoolStatsView:
        return PoolStatsView(
            today=self.get_stats(on),
            pending_transactions=self.count_pending(),
        )
