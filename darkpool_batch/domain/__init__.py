"""
darkpool_batch.domain -- Pure types and arithmetic for batch cycles.

ZERO I/O.  All types are frozen dataclasses.
"""

from darkpool_batch.domain.rollup import fold_running_average
from darkpool_batch.domain.types import (
    ClaimedBatch,
    CycleResult,
    DispatchOutcome,
    TargetResponse,
)

__all__ = [
    "ClaimedBatch",
    "CycleResult",
    "DispatchOutcome",
    "TargetResponse",
    "fold_running_average",
]
