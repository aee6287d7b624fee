"""Tests for darkpool_batch.services.stats -- daily rollup folding."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from darkpool_kernel.domain.types import BatchStatus, ExecutionBatch
from darkpool_kernel.exceptions import StatsUpdateError
from darkpool_kernel.models import PoolStatsModel
from darkpool_kernel.selectors import PoolSelector

from darkpool_batch.services.selector import BatchSelector
from darkpool_batch.services.stats import StatsAggregator


def _batch(count: int, total: str) -> ExecutionBatch:
    return ExecutionBatch(
        batch_id=uuid4(),
        transaction_count=count,
        total_value=Decimal(total),
        status=BatchStatus.COMPLETED,
    )


class TestFoldBatch:

    def test_first_batch_of_the_day_creates_row(self, session, clock):
        stats = StatsAggregator(clock=clock).fold_batch(
            session, _batch(3, "30.00"), total_fees=Decimal("1.50"),
        )
        session.commit()

        assert stats.date == date(2024, 1, 1)
        assert stats.total_transactions == 3
        assert stats.total_volume == Decimal("30.00")
        assert stats.total_fees == Decimal("1.50")
        assert stats.avg_batch_size == Decimal("3")
        assert stats.mev_attacks_prevented == 0

    def test_second_batch_folds_running_average(self, session, clock):
        aggregator = StatsAggregator(clock=clock)
        aggregator.fold_batch(session, _batch(3, "30.00"), total_fees=Decimal("1.50"))
        stats = aggregator.fold_batch(
            session, _batch(2, "5.00"), total_fees=Decimal("0.26"),
        )
        session.commit()

        assert stats.total_transactions == 5
        assert stats.total_volume == Decimal("35.00")
        assert stats.total_fees == Decimal("1.76")
        assert stats.avg_batch_size == Decimal("2.200000")

    def test_rollup_rows_are_per_day(self, session, clock):
        aggregator = StatsAggregator(clock=clock)
        aggregator.fold_batch(session, _batch(1, "1.00"), total_fees=Decimal("0.05"))
        clock.advance(24 * 3600)
        aggregator.fold_batch(session, _batch(2, "2.00"), total_fees=Decimal("0.10"))
        session.commit()

        selector = PoolSelector(session)
        assert selector.get_stats(date(2024, 1, 1)).total_transactions == 1
        assert selector.get_stats(date(2024, 1, 2)).total_transactions == 2
        assert selector.get_stats(date(2024, 1, 2)).avg_batch_size == Decimal("2")

    def test_fees_default_to_member_fees(self, session, clock, submit):
        submit(payment_amount="10.00")
        submit(payment_amount="20.00")
        claimed = BatchSelector(10, clock=clock).select_and_claim(session)
        session.commit()

        stats = StatsAggregator(clock=clock).fold_batch(session, claimed.batch)

        assert stats.total_fees == Decimal("1.50")
        assert stats.total_volume == Decimal("30.00")

    def test_mev_counter_never_changes(self, session, clock):
        aggregator = StatsAggregator(clock=clock)
        for _ in range(3):
            aggregator.fold_batch(session, _batch(2, "2.00"), total_fees=Decimal("0"))
        session.commit()
        row = session.query(PoolStatsModel).one()
        assert row.mev_attacks_prevented == 0

    def test_storage_failure_raises_stats_update_error(self, session, clock, monkeypatch):
        batch = _batch(1, "1.00")

        def broken_flush(*args, **kwargs):
            raise OperationalError("UPDATE pool_stats", {}, Exception("database is locked"))

        monkeypatch.setattr(session, "flush", broken_flush)
        with pytest.raises(StatsUpdateError) as exc_info:
            StatsAggregator(clock=clock).fold_batch(
                session, batch, total_fees=Decimal("0.05"),
            )
        assert exc_info.value.batch_id == str(batch.batch_id)
        assert "database is locked" in exc_info.value.detail
