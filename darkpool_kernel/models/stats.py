"""
ORM model for the daily pool rollup.

Contract:
    One row per UTC calendar date (``date`` is UNIQUE, ``YYYY-MM-DD``).
    Rows are folded into incrementally by the stats aggregator and never
    rewritten wholesale.

Architecture: darkpool_kernel/models.  Imports from darkpool_kernel.db only.
"""

from __future__ import annotations

from datetime import date as date_type
from decimal import Decimal

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from darkpool_kernel.db.base import Base
from darkpool_kernel.db.types import DecimalString
from darkpool_kernel.domain.types import PoolStats


class PoolStatsModel(Base):
    __tablename__ = "pool_stats"

    date: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    total_transactions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_volume: Mapped[Decimal] = mapped_column(
        DecimalString(), nullable=False, default=Decimal("0"),
    )
    total_fees: Mapped[Decimal] = mapped_column(
        DecimalString(), nullable=False, default=Decimal("0"),
    )
    avg_batch_size: Mapped[Decimal] = mapped_column(
        DecimalString(), nullable=False, default=Decimal("0"),
    )
    # Reported but never incremented by the dispatch path
    mev_attacks_prevented: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_dto(self) -> PoolStats:
        return PoolStats(
            date=date_type.fromisoformat(self.date),
            total_transactions=self.total_transactions,
            total_volume=self.total_volume,
            total_fees=self.total_fees,
            avg_batch_size=self.avg_batch_size,
            mev_attacks_prevented=self.mev_attacks_prevented,
        )
