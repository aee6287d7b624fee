"""
BatchCycle -- one select / dispatch / finalize / fold pass.

Contract:
    ``run()`` executes one cycle and returns a CycleResult.  ``reconcile()``
    sweeps batches left open by an earlier, interrupted cycle.

Single flight:
    At most one cycle runs per BatchCycle instance.  A ``run()`` that finds
    another in progress returns immediately with ``skipped=True``.  Across
    processes, the conditional claim in BatchSelector keeps two cycles from
    ever owning the same transaction.

Commit boundaries (each its own transaction):
    1. claim        -- members ``selected`` + batch row ``executing``
    2. per member   -- transition + result row (Dispatcher)
    3. finalize     -- batch ``completed``
    4. stats fold   -- advisory; failure is logged, never undoes 1-3
"""

from __future__ import annotations

import threading
import time
from decimal import Decimal
from typing import Callable
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from darkpool_kernel.domain.types import ExecutionBatch, TransactionStatus
from darkpool_kernel.exceptions import StatsUpdateError
from darkpool_kernel.logging_config import LogContext, get_logger

from darkpool_batch.domain.types import ClaimedBatch, CycleResult
from darkpool_batch.services.dispatcher import Dispatcher
from darkpool_batch.services.finalizer import BatchFinalizer
from darkpool_batch.services.selector import BatchSelector
from darkpool_batch.services.stats import StatsAggregator

logger = get_logger("batch.cycle")


class BatchCycle:
    """Runs batch cycles against sessions from ``session_factory``."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        selector: BatchSelector,
        dispatcher: Dispatcher,
        finalizer: BatchFinalizer,
        stats: StatsAggregator,
    ):
        self._session_factory = session_factory
        self._selector = selector
        self._dispatcher = dispatcher
        self._finalizer = finalizer
        self._stats = stats
        self._lock = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def run(self) -> CycleResult:
        cycle_id = uuid4().hex
        if not self._lock.acquire(blocking=False):
            logger.info("batch_cycle_skipped", extra={"cycle_id": cycle_id})
            return CycleResult(cycle_id=cycle_id, skipped=True)

        try:
            with LogContext.bind(cycle_id=cycle_id):
                return self._run(cycle_id)
        finally:
            self._lock.release()

    def reconcile(self) -> tuple[ExecutionBatch, ...]:
        """Finalize eligible open batches and fold each into the rollup.

        Shares the single-flight guard with ``run()``; returns an empty
        tuple if a cycle is in progress.
        """
        if not self._lock.acquire(blocking=False):
            logger.info("batch_reconcile_skipped")
            return ()

        try:
            with LogContext.bind(cycle_id=uuid4().hex):
                return self._reconcile()
        finally:
            self._lock.release()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _reconcile(self) -> tuple[ExecutionBatch, ...]:
        session = self._session_factory()
        try:
            try:
                finalized = self._finalizer.reconcile_open_batches(session)
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("batch_reconcile_failed")
                return ()
            for batch in finalized:
                self._fold_stats(session, batch)
            return finalized
        finally:
            session.close()

    def _run(self, cycle_id: str) -> CycleResult:
        start = time.monotonic()
        session = self._session_factory()
        try:
            try:
                claimed = self._selector.select_and_claim(session)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("batch_cycle_failed", extra={"stage": "claim"})
                return CycleResult(cycle_id=cycle_id, error=str(exc))

            if claimed is None:
                return CycleResult(cycle_id=cycle_id)

            with LogContext.bind(batch_id=str(claimed.batch.batch_id)):
                return self._process(session, cycle_id, claimed, start)
        finally:
            session.close()

    def _process(
        self,
        session: Session,
        cycle_id: str,
        claimed: ClaimedBatch,
        start: float,
    ) -> CycleResult:
        batch_id = claimed.batch.batch_id
        outcomes = self._dispatcher.dispatch_batch(session, claimed)

        completed = None
        try:
            completed = self._finalizer.finalize(session, batch_id)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("batch_cycle_failed", extra={"stage": "finalize"})

        stats_updated = False
        if completed is not None:
            stats_updated = self._fold_stats(session, completed, claimed.total_fees)

        result = CycleResult(
            cycle_id=cycle_id,
            batch_id=batch_id,
            selected=len(claimed.members),
            executed=sum(
                1 for o in outcomes
                if o.recorded and o.status == TransactionStatus.EXECUTED
            ),
            failed=sum(
                1 for o in outcomes
                if o.recorded and o.status == TransactionStatus.FAILED
            ),
            succeeded=sum(1 for o in outcomes if o.recorded and o.success),
            completed=completed is not None,
            stats_updated=stats_updated,
            outcomes=outcomes,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        logger.info("batch_cycle_finished", extra=result.as_dict())
        return result

    def _fold_stats(
        self,
        session: Session,
        batch: ExecutionBatch,
        total_fees: Decimal | None = None,
    ) -> bool:
        try:
            self._stats.fold_batch(session, batch, total_fees)
            session.commit()
        except (StatsUpdateError, SQLAlchemyError):
            session.rollback()
            logger.exception(
                "pool_stats_update_failed",
                extra={"batch_id": str(batch.batch_id)},
            )
            return False
        return True
