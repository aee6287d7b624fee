"""darkpool_batch.services -- Stateful services for batch cycles."""

from darkpool_batch.services.cycle import BatchCycle
from darkpool_batch.services.dispatcher import Dispatcher
from darkpool_batch.services.finalizer import BatchFinalizer
from darkpool_batch.services.scheduler import BatchScheduler
from darkpool_batch.services.selector import BatchSelector
from darkpool_batch.services.stats import StatsAggregator
from darkpool_batch.services.target_client import HttpTargetClient, TargetClient

__all__ = [
    "BatchCycle",
    "BatchFinalizer",
    "BatchScheduler",
    "BatchSelector",
    "Dispatcher",
    "HttpTargetClient",
    "StatsAggregator",
    "TargetClient",
]
