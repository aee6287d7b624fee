"""Read-only selectors (query layer)."""

from darkpool_kernel.selectors.base import BaseSelector
from darkpool_kernel.selectors.pool_selector import PoolSelector

__all__ = ["BaseSelector", "PoolSelector"]
