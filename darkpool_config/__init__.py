"""
darkpool_config -- explicit configuration for the pool.

Responsibility:
    Produces the one ``PoolConfig`` a process runs with.  Components receive
    it through their constructors; none of them read the environment.

Architecture position:
    Sits above ``darkpool_kernel`` and below intake, batch, and api.
"""

from darkpool_config.loader import load_config, load_yaml_file
from darkpool_config.schema import PoolConfig

__all__ = ["PoolConfig", "load_config", "load_yaml_file"]
