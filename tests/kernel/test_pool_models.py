"""ORM round-trips through in-memory SQLite for the pool tables."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from darkpool_kernel.domain.types import (
    BatchStatus,
    ExecutionBatch,
    PrivateTransaction,
    TransactionResult,
    TransactionStatus,
)
from darkpool_kernel.models import (
    ExecutionBatchModel,
    PoolStatsModel,
    PrivateTransactionModel,
    TransactionResultModel,
)

NOON = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _transaction(**overrides) -> PrivateTransaction:
    values = dict(
        transaction_id=uuid4(),
        agent_id="agent-1",
        target_endpoint="https://target.example/api",
        request_payload='{"a": 1}',
        payment_amount=Decimal("10.00"),
        privacy_fee=Decimal("0.50"),
        status=TransactionStatus.PENDING,
        created_at=NOON,
    )
    values.update(overrides)
    return PrivateTransaction(**values)


class TestPrivateTransactionModel:

    def test_round_trip_preserves_decimals_and_utc(self, session_factory):
        dto = _transaction()
        with session_factory() as s:
            s.add(PrivateTransactionModel.from_dto(dto))
            s.commit()

        with session_factory() as s:
            loaded = s.get(PrivateTransactionModel, dto.transaction_id).to_dto()

        assert loaded == dto
        assert str(loaded.payment_amount) == "10.00"
        assert loaded.created_at.tzinfo is not None

    def test_batch_id_is_nullable(self, session_factory):
        dto = _transaction()
        with session_factory() as s:
            s.add(PrivateTransactionModel.from_dto(dto))
            s.commit()
            assert s.get(PrivateTransactionModel, dto.transaction_id).batch_id is None


class TestTransactionResultModel:

    def _batch(self) -> ExecutionBatch:
        return ExecutionBatch(
            batch_id=uuid4(),
            transaction_count=1,
            total_value=Decimal("10.00"),
            status=BatchStatus.EXECUTING,
            created_at=NOON,
        )

    def test_round_trip(self, session_factory):
        batch = self._batch()
        tx = _transaction(status=TransactionStatus.EXECUTED, batch_id=batch.batch_id)
        result = TransactionResult(
            transaction_id=tx.transaction_id,
            batch_id=batch.batch_id,
            success=False,
            response_data='{"error": "nope"}',
            status_code=500,
            executed_at=NOON,
        )
        with session_factory() as s:
            s.add(ExecutionBatchModel.from_dto(batch))
            s.add(PrivateTransactionModel.from_dto(tx))
            s.flush()
            s.add(TransactionResultModel.from_dto(result))
            s.commit()

        with session_factory() as s:
            model = s.query(TransactionResultModel).one()
            assert model.to_dto() == result

    def test_one_result_per_transaction(self, session_factory):
        batch = self._batch()
        tx = _transaction(batch_id=batch.batch_id)
        with session_factory() as s:
            s.add(ExecutionBatchModel.from_dto(batch))
            s.add(PrivateTransactionModel.from_dto(tx))
            s.flush()
            for _ in range(2):
                s.add(TransactionResultModel.from_dto(TransactionResult(
                    transaction_id=tx.transaction_id,
                    batch_id=batch.batch_id,
                    success=True,
                    executed_at=NOON,
                )))
            with pytest.raises(IntegrityError):
                s.flush()


class TestPoolStatsModel:

    def test_one_row_per_date(self, session_factory):
        with session_factory() as s:
            s.add(PoolStatsModel(date="2024-01-01"))
            s.add(PoolStatsModel(date="2024-01-01"))
            with pytest.raises(IntegrityError):
                s.flush()

    def test_defaults_are_zero(self, session_factory):
        with session_factory() as s:
            s.add(PoolStatsModel(date="2024-01-01"))
            s.commit()
            stats = s.query(PoolStatsModel).one().to_dto()
        assert stats.total_transactions == 0
        assert stats.total_volume == Decimal("0")
        assert stats.avg_batch_size == Decimal("0")
        assert stats.mev_attacks_prevented == 0
