"""
ORM model for execution batches.

Contract:
    Created once per cycle with a snapshot ``transaction_count`` and
    ``total_value`` and status ``executing``; moved once to ``completed``
    when every member has a result row; immutable thereafter.

Architecture: darkpool_kernel/models.  Imports from darkpool_kernel.db only.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from darkpool_kernel.db.base import Base
from darkpool_kernel.db.types import DecimalString, UTCDateTime
from darkpool_kernel.domain.types import BatchStatus, ExecutionBatch


class ExecutionBatchModel(Base):
    """A bounded, FIFO-selected group of transactions dispatched in one cycle."""

    __tablename__ = "execution_batches"

    __table_args__ = (
        Index("ix_eb_status", "status"),
    )

    transaction_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_value: Mapped[Decimal] = mapped_column(
        DecimalString(), nullable=False, default=Decimal("0"),
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BatchStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    executed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    def to_dto(self) -> ExecutionBatch:
        return ExecutionBatch(
            batch_id=self.id,
            transaction_count=self.transaction_count,
            total_value=self.total_value,
            status=BatchStatus(self.status),
            created_at=self.created_at,
            executed_at=self.executed_at,
        )

    @classmethod
    def from_dto(cls, dto: ExecutionBatch) -> ExecutionBatchModel:
        return cls(
            id=dto.batch_id,
            transaction_count=dto.transaction_count,
            total_value=dto.total_value,
            status=dto.status.value,
            created_at=dto.created_at,
            executed_at=dto.executed_at,
        )
