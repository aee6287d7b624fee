"""
darkpool_kernel.models -- ORM models for the four pool tables.

Architecture: darkpool_kernel/models. Imports from darkpool_kernel.db and
darkpool_kernel.domain.types only.
"""

from darkpool_kernel.models.batch import ExecutionBatchModel
from darkpool_kernel.models.stats import PoolStatsModel
from darkpool_kernel.models.transaction import (
    PrivateTransactionModel,
    TransactionResultModel,
)

__all__ = [
    "ExecutionBatchModel",
    "PoolStatsModel",
    "PrivateTransactionModel",
    "TransactionResultModel",
]
