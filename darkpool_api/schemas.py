"""Response models. Money is rendered as decimal strings, times as ISO-8601."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from darkpool_kernel.db.types import format_decimal, format_money
from darkpool_kernel.domain.types import (
    BatchView,
    PoolStatsView,
    SubmissionReceipt,
    TransactionStatusView,
)


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Any = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorBody


class SubmitResponse(BaseModel):
    success: bool = True
    transaction_id: str
    status: str
    privacy_fee: str
    total_cost: str
    message: str
    estimated_execution: str

    @classmethod
    def from_receipt(cls, receipt: SubmissionReceipt) -> SubmitResponse:
        return cls(
            transaction_id=str(receipt.transaction_id),
            status=receipt.status.value,
            privacy_fee=format_money(receipt.privacy_fee),
            total_cost=format_money(receipt.total_cost),
            message="Transaction queued for private batch execution",
            estimated_execution=f"{receipt.estimated_execution_seconds}s",
        )


class TransactionDetail(BaseModel):
    id: str
    status: str
    batch_id: str | None = None
    created_at: datetime | None = None
    executed_at: datetime | None = None
    result: Any = None
    error: str | None = None


class TransactionStatusResponse(BaseModel):
    success: bool = True
    transaction: TransactionDetail

    @classmethod
    def from_view(cls, view: TransactionStatusView) -> TransactionStatusResponse:
        tx = view.transaction
        return cls(
            transaction=TransactionDetail(
                id=str(tx.transaction_id),
                status=tx.status.value,
                batch_id=str(tx.batch_id) if tx.batch_id else None,
                created_at=tx.created_at,
                executed_at=tx.executed_at,
                result=view.result_payload,
                error=view.error,
            )
        )


class BatchMemberDetail(BaseModel):
    id: str
    status: str
    executed_at: datetime | None = None


class BatchDetail(BaseModel):
    id: str
    status: str
    transaction_count: int
    total_value: str
    created_at: datetime | None = None
    executed_at: datetime | None = None
    transactions: list[BatchMemberDetail]


class BatchResponse(BaseModel):
    success: bool = True
    batch: BatchDetail

    @classmethod
    def from_view(cls, view: BatchView) -> BatchResponse:
        batch = view.batch
        return cls(
            batch=BatchDetail(
                id=str(batch.batch_id),
                status=batch.status.value,
                transaction_count=batch.transaction_count,
                total_value=format_decimal(batch.total_value),
                created_at=batch.created_at,
                executed_at=batch.executed_at,
                transactions=[
                    BatchMemberDetail(
                        id=str(m.transaction_id),
                        status=m.status.value,
                        executed_at=m.executed_at,
                    )
                    for m in view.members
                ],
            )
        )


class DailyStats(BaseModel):
    date: str
    total_transactions: int
    total_volume: str
    total_fees: str
    avg_batch_size: str
    mev_attacks_prevented: int


class StatsResponse(BaseModel):
    success: bool = True
    today: DailyStats
    pending_transactions: int

    @classmethod
    def from_view(cls, view: PoolStatsView) -> StatsResponse:
        stats = view.today
        return cls(
            today=DailyStats(
                date=stats.date.isoformat(),
                total_transactions=stats.total_transactions,
                total_volume=format_decimal(stats.total_volume),
                total_fees=format_decimal(stats.total_fees),
                avg_batch_size=format_decimal(stats.avg_batch_size),
                mev_attacks_prevented=stats.mev_attacks_prevented,
            ),
            pending_transactions=view.pending_transactions,
        )


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str
