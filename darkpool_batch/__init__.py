"""
darkpool_batch -- periodic batch formation and dispatch.

One cycle: claim up to ``max_batch_size`` oldest pending transactions into a
new batch, dispatch each member to its target independently, finalize the
batch once every member has a result row, and fold the batch into the
daily rollup.

Architecture:
    darkpool_batch/ sits above darkpool_kernel, darkpool_config and
    darkpool_intake.  Nothing below it imports from darkpool_batch.

Invariants:
    - FIFO selection by (created_at, id), bounded by max_batch_size
    - At most one cycle claims a given pending transaction: the claim is a
      single conditional UPDATE restricted to rows still ``pending``
    - Each member transitions exactly once, and its result row is committed
      with the transition
    - One member's failure never aborts, retries, or affects another
    - A batch becomes ``completed`` only after every member's outcome is
      durably recorded; it has no failed state
    - Stats are advisory: a failed fold never undoes batch state
    - All timestamps from an injected Clock
"""

from darkpool_batch.domain.types import ClaimedBatch, CycleResult, DispatchOutcome
from darkpool_batch.orchestrator import PoolOrchestrator

__all__ = [
    "ClaimedBatch",
    "CycleResult",
    "DispatchOutcome",
    "PoolOrchestrator",
]
