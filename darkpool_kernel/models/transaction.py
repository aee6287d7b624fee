"""
ORM models for queued transactions and their dispatch results.

Contract:
    PrivateTransactionModel is created by intake in ``pending`` and mutated
    by the batch path only (claim to ``selected``, then exactly one move to
    ``executed`` or ``failed``).  Rows are never deleted.

    TransactionResultModel holds exactly one row per transaction that has
    left ``selected``; ``transaction_id`` is UNIQUE.

Architecture: darkpool_kernel/models.  Imports from darkpool_kernel.db only.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from darkpool_kernel.db.base import Base, UUIDString
from darkpool_kernel.db.types import DecimalString, UTCDateTime
from darkpool_kernel.domain.types import (
    PrivateTransaction,
    TransactionResult,
    TransactionStatus,
)


class PrivateTransactionModel(Base):
    """A submission held out of any public queue until dispatched."""

    __tablename__ = "private_transactions"

    __table_args__ = (
        Index("ix_pt_status", "status"),
        Index("ix_pt_batch_id", "batch_id"),
        Index("ix_pt_created_at", "created_at"),
    )

    agent_id: Mapped[str] = mapped_column(String(200), nullable=False)
    target_endpoint: Mapped[str] = mapped_column(Text, nullable=False)
    request_payload: Mapped[str] = mapped_column(Text, nullable=False)
    payment_amount: Mapped[Decimal] = mapped_column(DecimalString(), nullable=False)
    privacy_fee: Mapped[Decimal] = mapped_column(DecimalString(), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TransactionStatus.PENDING.value,
    )
    # No FK: the claim assigns batch_id before the batch row is inserted
    batch_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    executed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    def to_dto(self) -> PrivateTransaction:
        return PrivateTransaction(
            transaction_id=self.id,
            agent_id=self.agent_id,
            target_endpoint=self.target_endpoint,
            request_payload=self.request_payload,
            payment_amount=self.payment_amount,
            privacy_fee=self.privacy_fee,
            status=TransactionStatus(self.status),
            batch_id=self.batch_id,
            created_at=self.created_at,
            executed_at=self.executed_at,
        )

    @classmethod
    def from_dto(cls, dto: PrivateTransaction) -> PrivateTransactionModel:
        return cls(
            id=dto.transaction_id,
            agent_id=dto.agent_id,
            target_endpoint=dto.target_endpoint,
            request_payload=dto.request_payload,
            payment_amount=dto.payment_amount,
            privacy_fee=dto.privacy_fee,
            status=dto.status.value,
            batch_id=dto.batch_id,
            created_at=dto.created_at,
            executed_at=dto.executed_at,
        )


class TransactionResultModel(Base):
    """Dispatch outcome for one transaction."""

    __tablename__ = "transaction_results"

    __table_args__ = (
        Index("ix_tr_batch_id", "batch_id"),
    )

    transaction_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("private_transactions.id"),
        nullable=False,
        unique=True,
    )
    batch_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("execution_batches.id"),
        nullable=False,
    )
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    response_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    executed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def to_dto(self) -> TransactionResult:
        return TransactionResult(
            transaction_id=self.transaction_id,
            batch_id=self.batch_id,
            success=self.success,
            response_data=self.response_data,
            error_message=self.error_message,
            status_code=self.status_code,
            executed_at=self.executed_at,
        )

    @classmethod
    def from_dto(cls, dto: TransactionResult) -> TransactionResultModel:
        return cls(
            transaction_id=dto.transaction_id,
            batch_id=dto.batch_id,
            success=dto.success,
            response_data=dto.response_data,
            error_message=dto.error_message,
            status_code=dto.status_code,
            executed_at=dto.executed_at,
        )
