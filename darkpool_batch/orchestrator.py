"""
PoolOrchestrator -- DI container for the dark pool.

Contract:
    Composes the intake service, the query selector, and the batch cycle
    from one PoolConfig, one Clock, one session factory and one target
    client.  Single place where all pool dependencies are wired.

    - ``from_config()`` initializes the engine from ``database_url``.
    - ``create_intake()`` / ``create_selector()`` bind to a caller session.
    - ``cycle`` is shared, so every caller goes through the same
      single-flight guard.
    - ``create_scheduler()`` returns a BatchScheduler for background use.

Non-goals:
    - Does NOT start the scheduler automatically -- caller decides.
    - Does NOT manage request session lifecycle -- caller controls commits.
"""

from __future__ import annotations

from typing import Callable

from sqlalchemy.orm import Session

from darkpool_config.schema import PoolConfig
from darkpool_intake.service import IntakeService
from darkpool_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from darkpool_kernel.domain.clock import Clock, SystemClock
from darkpool_kernel.logging_config import get_logger
from darkpool_kernel.selectors.pool_selector import PoolSelector

from darkpool_batch.services.cycle import BatchCycle
from darkpool_batch.services.dispatcher import Dispatcher
from darkpool_batch.services.finalizer import BatchFinalizer
from darkpool_batch.services.scheduler import BatchScheduler
from darkpool_batch.services.selector import BatchSelector
from darkpool_batch.services.stats import StatsAggregator
from darkpool_batch.services.target_client import HttpTargetClient, TargetClient

logger = get_logger("batch.orchestrator")


class PoolOrchestrator:
    """DI container for intake, queries and batch cycles."""

    def __init__(
        self,
        config: PoolConfig,
        session_factory: Callable[[], Session],
        clock: Clock | None = None,
        target_client: TargetClient | None = None,
    ) -> None:
        self._config = config
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._owns_client = target_client is None
        self._target_client = target_client or HttpTargetClient(
            timeout_seconds=config.dispatch_timeout_seconds,
            user_agent=config.service_name,
        )
        self._cycle = BatchCycle(
            session_factory=session_factory,
            selector=BatchSelector(config.max_batch_size, clock=self._clock),
            dispatcher=Dispatcher(self._target_client, clock=self._clock),
            finalizer=BatchFinalizer(clock=self._clock),
            stats=StatsAggregator(clock=self._clock),
        )

        logger.info(
            "pool_orchestrator_created",
            extra={
                "max_batch_size": config.max_batch_size,
                "batch_window_seconds": config.batch_window_seconds,
                "privacy_premium_percent": config.privacy_premium_percent,
            },
        )

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: PoolConfig,
        clock: Clock | None = None,
        target_client: TargetClient | None = None,
        create_schema: bool = True,
    ) -> PoolOrchestrator:
        """Initialize the engine for ``config.database_url`` and wire everything.

        Args:
            config: Pool settings.
            clock: Optional clock for deterministic testing.
            target_client: Optional client; defaults to HttpTargetClient.
            create_schema: Create missing tables on startup.
        """
        init_engine_from_url(config.database_url)
        if create_schema:
            create_tables()
        return cls(
            config=config,
            session_factory=get_session_factory(),
            clock=clock,
            target_client=target_client,
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def session_factory(self) -> Callable[[], Session]:
        return self._session_factory

    @property
    def cycle(self) -> BatchCycle:
        return self._cycle

    # -------------------------------------------------------------------------
    # Service creation
    # -------------------------------------------------------------------------

    def create_intake(self, session: Session) -> IntakeService:
        return IntakeService(session, self._config, clock=self._clock)

    def create_selector(self, session: Session) -> PoolSelector:
        return PoolSelector(session)

    def create_scheduler(self) -> BatchScheduler:
        return BatchScheduler(
            cycle=self._cycle,
            interval_seconds=self._config.batch_window_seconds,
        )

    def close(self) -> None:
        """Release the target client if this orchestrator created it."""
        if self._owns_client:
            self._target_client.close()
