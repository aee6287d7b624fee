"""
StatsAggregator -- fold completed batches into the per-day rollup.

Contract:
    ``fold_batch()`` adds one batch to the row for the current UTC date,
    creating the row on first use.  Counts, volume and fees are summed;
    the average batch size uses ``fold_running_average``.

Stats are advisory.  The cycle calls this after the batch is committed as
``completed``; a failure here is raised as StatsUpdateError and the batch
is left as it is.

``mev_attacks_prevented`` is reported but never incremented.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from darkpool_kernel.db.types import sum_money
from darkpool_kernel.domain.clock import Clock, SystemClock
from darkpool_kernel.domain.types import ExecutionBatch, PoolStats
from darkpool_kernel.exceptions import StatsUpdateError
from darkpool_kernel.logging_config import get_logger
from darkpool_kernel.models.stats import PoolStatsModel
from darkpool_kernel.models.transaction import PrivateTransactionModel

from darkpool_batch.domain.rollup import fold_running_average

logger = get_logger("batch.stats")


class StatsAggregator:

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()

    def fold_batch(
        self,
        session: Session,
        batch: ExecutionBatch,
        total_fees: Decimal | None = None,
        on: date | None = None,
    ) -> PoolStats:
        """Add ``batch`` to the rollup for ``on`` (default: today, UTC).

        ``total_fees`` defaults to the sum of the members' privacy fees.

        Raises:
            StatsUpdateError: If the rollup row could not be written.
        """
        day = (on or self._clock.today()).isoformat()
        size = batch.transaction_count
        try:
            fees = (
                total_fees
                if total_fees is not None
                else self._member_fees(session, batch)
            )
            row = session.execute(
                select(PoolStatsModel)
                .where(PoolStatsModel.date == day)
                .with_for_update()
            ).scalar_one_or_none()

            if row is None:
                row = PoolStatsModel(
                    date=day,
                    total_transactions=size,
                    total_volume=batch.total_value,
                    total_fees=fees,
                    avg_batch_size=Decimal(size),
                    mev_attacks_prevented=0,
                )
                session.add(row)
            else:
                row.avg_batch_size = fold_running_average(
                    row.avg_batch_size, row.total_transactions, size,
                )
                row.total_transactions = row.total_transactions + size
                row.total_volume = sum_money((row.total_volume, batch.total_value))
                row.total_fees = sum_money((row.total_fees, fees))
            session.flush()
        except SQLAlchemyError as exc:
            raise StatsUpdateError(str(batch.batch_id), str(exc)) from exc

        logger.info(
            "pool_stats_folded",
            extra={
                "batch_id": str(batch.batch_id),
                "date": day,
                "batch_size": size,
                "total_transactions": row.total_transactions,
                "avg_batch_size": row.avg_batch_size,
            },
        )
        return row.to_dto()

    @staticmethod
    def _member_fees(session: Session, batch: ExecutionBatch) -> Decimal:
        fees = session.execute(
            select(PrivateTransactionModel.privacy_fee)
            .where(PrivateTransactionModel.batch_id == batch.batch_id)
        ).scalars().all()
        return sum_money(fees)
