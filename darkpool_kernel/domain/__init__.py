"""
darkpool_kernel.domain -- Pure types, fee calculation, and clock.

ZERO I/O (SystemClock excepted).
"""

from darkpool_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from darkpool_kernel.domain.fees import (
    calculate_privacy_fee,
    calculate_total_cost,
)
from darkpool_kernel.domain.types import (
    BatchMember,
    BatchStatus,
    BatchView,
    ExecutionBatch,
    FieldError,
    PoolStats,
    PoolStatsView,
    PrivateTransaction,
    SubmissionReceipt,
    TransactionResult,
    TransactionStatus,
    TransactionStatusView,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "calculate_privacy_fee",
    "calculate_total_cost",
    "BatchMember",
    "BatchStatus",
    "BatchView",
    "ExecutionBatch",
    "FieldError",
    "PoolStats",
    "PoolStatsView",
    "PrivateTransaction",
    "SubmissionReceipt",
    "TransactionResult",
    "TransactionStatus",
    "TransactionStatusView",
]
