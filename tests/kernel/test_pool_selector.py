"""Tests for darkpool_kernel.selectors.pool_selector -- read-only lookups."""

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from darkpool_kernel.domain.types import (
    BatchStatus,
    ExecutionBatch,
    TransactionResult,
    TransactionStatus,
)
from darkpool_kernel.exceptions import BatchNotFoundError, TransactionNotFoundError
from darkpool_kernel.models import (
    ExecutionBatchModel,
    PoolStatsModel,
    PrivateTransactionModel,
    TransactionResultModel,
)
from darkpool_kernel.selectors import PoolSelector

NOON = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _executed_batch(session, outcomes):
    """Insert a batch whose members carry the given (success, status_code, body) results."""
    batch = ExecutionBatch(
        batch_id=uuid4(),
        transaction_count=len(outcomes),
        total_value=Decimal("10.00") * len(outcomes),
        status=BatchStatus.COMPLETED,
        created_at=NOON,
        executed_at=NOON,
    )
    session.add(ExecutionBatchModel.from_dto(batch))
    tx_ids = []
    for i, (success, status_code, body, error) in enumerate(outcomes):
        tx_id = uuid4()
        tx_ids.append(tx_id)
        session.add(PrivateTransactionModel(
            id=tx_id,
            agent_id=f"agent-{i}",
            target_endpoint="https://target.example/api",
            request_payload="{}",
            payment_amount=Decimal("10.00"),
            privacy_fee=Decimal("0.50"),
            status=(
                TransactionStatus.EXECUTED.value if error is None
                else TransactionStatus.FAILED.value
            ),
            batch_id=batch.batch_id,
            created_at=NOON.replace(second=i),
            executed_at=NOON,
        ))
        session.flush()
        session.add(TransactionResultModel.from_dto(TransactionResult(
            transaction_id=tx_id,
            batch_id=batch.batch_id,
            success=success,
            response_data=json.dumps(body) if error is None else None,
            error_message=error,
            status_code=status_code,
            executed_at=NOON,
        )))
    session.commit()
    return batch, tx_ids


class TestGetTransaction:

    def test_pending_transaction_has_no_result(self, session, submit):
        receipt = submit()
        view = PoolSelector(session).get_transaction(receipt.transaction_id)
        assert view.transaction.status == TransactionStatus.PENDING
        assert view.result is None
        assert view.result_payload is None
        assert view.error is None

    def test_accepts_string_id(self, session, submit):
        receipt = submit()
        view = PoolSelector(session).get_transaction(str(receipt.transaction_id))
        assert view.transaction.transaction_id == receipt.transaction_id

    def test_successful_result_exposes_payload(self, session):
        _, (tx_id,) = _executed_batch(session, [(True, 200, {"filled": 3}, None)])
        view = PoolSelector(session).get_transaction(tx_id)
        assert view.result_payload == {"filled": 3}
        assert view.error is None

    def test_unsuccessful_response_hides_payload(self, session):
        _, (tx_id,) = _executed_batch(session, [(False, 500, {"err": "x"}, None)])
        view = PoolSelector(session).get_transaction(tx_id)
        assert view.transaction.status == TransactionStatus.EXECUTED
        assert view.result.status_code == 500
        assert view.result_payload is None

    def test_failed_transaction_exposes_error(self, session):
        _, (tx_id,) = _executed_batch(session, [(False, None, None, "connection refused")])
        view = PoolSelector(session).get_transaction(tx_id)
        assert view.transaction.status == TransactionStatus.FAILED
        assert view.error == "connection refused"

    def test_unknown_id(self, session):
        with pytest.raises(TransactionNotFoundError):
            PoolSelector(session).get_transaction(uuid4())

    def test_malformed_id(self, session):
        with pytest.raises(TransactionNotFoundError):
            PoolSelector(session).get_transaction("not-a-uuid")


class TestGetBatch:

    def test_members_in_submission_order(self, session):
        batch, tx_ids = _executed_batch(session, [
            (True, 200, {}, None),
            (False, None, None, "timeout"),
            (True, 201, {}, None),
        ])
        view = PoolSelector(session).get_batch(batch.batch_id)
        assert view.batch.status == BatchStatus.COMPLETED
        assert view.batch.transaction_count == 3
        assert [m.transaction_id for m in view.members] == tx_ids
        assert [m.status for m in view.members] == [
            TransactionStatus.EXECUTED,
            TransactionStatus.FAILED,
            TransactionStatus.EXECUTED,
        ]

    def test_unknown_batch(self, session):
        with pytest.raises(BatchNotFoundError):
            PoolSelector(session).get_batch(uuid4())

    def test_malformed_batch_id(self, session):
        with pytest.raises(BatchNotFoundError):
            PoolSelector(session).get_batch("batch-1")


class TestStats:

    def test_missing_row_is_zeroed(self, session):
        stats = PoolSelector(session).get_stats(date(2024, 1, 1))
        assert stats.date == date(2024, 1, 1)
        assert stats.total_transactions == 0
        assert stats.total_volume == Decimal("0")

    def test_existing_row(self, session):
        session.add(PoolStatsModel(
            date="2024-01-01",
            total_transactions=3,
            total_volume=Decimal("30.00"),
            total_fees=Decimal("1.50"),
            avg_batch_size=Decimal("3"),
        ))
        session.commit()
        stats = PoolSelector(session).get_stats(date(2024, 1, 1))
        assert stats.total_transactions == 3
        assert stats.total_fees == Decimal("1.50")

    def test_view_counts_pending(self, session, submit):
        submit()
        submit()
        view = PoolSelector(session).get_stats_view(date(2024, 1, 1))
        assert view.pending_transactions == 2
        assert view.today.total_transactions == 0

    def test_reads_do_not_mutate(self, session, submit):
        submit()
        selector = PoolSelector(session)
        first = selector.get_stats_view(date(2024, 1, 1))
        second = selector.get_stats_view(date(2024, 1, 1))
        assert first == second
        assert not session.new and not session.dirty
