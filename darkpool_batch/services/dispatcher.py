"""
Dispatcher -- independent per-member dispatch with durable outcomes.

Contract:
    ``dispatch_batch()`` sends every member of a claimed batch to its
    target and records one terminal transition plus one result row per
    member.  The session is committed after each member, so outcomes
    already recorded survive a later failure in the same batch.

Invariants enforced:
    - Failure isolation: any exception from one member's call is captured
      on that member alone.  No retries.
    - Transition-once: the status update is conditional on ``selected``.
      A member that is no longer ``selected`` is skipped and gets no
      second result row.
    - All timestamps from the injected Clock.

Outcome mapping:
    response obtained (any status)  -> executed, success = 2xx,
                                       response body stored
    no usable response              -> failed, success = False,
                                       error message stored
"""

from __future__ import annotations

import json
import time
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from darkpool_kernel.domain.clock import Clock, SystemClock
from darkpool_kernel.domain.types import (
    PrivateTransaction,
    TransactionResult,
    TransactionStatus,
)
from darkpool_kernel.exceptions import PersistenceError
from darkpool_kernel.logging_config import LogContext, get_logger
from darkpool_kernel.models.transaction import (
    PrivateTransactionModel,
    TransactionResultModel,
)

from darkpool_batch.domain.types import ClaimedBatch, DispatchOutcome
from darkpool_batch.services.target_client import TargetClient

logger = get_logger("batch.dispatcher")


class Dispatcher:
    """Dispatches claimed members one by one."""

    def __init__(self, target_client: TargetClient, clock: Clock | None = None):
        self._client = target_client
        self._clock = clock or SystemClock()

    def dispatch_batch(
        self,
        session: Session,
        claimed: ClaimedBatch,
    ) -> tuple[DispatchOutcome, ...]:
        outcomes = []
        for member in claimed.members:
            with LogContext.bind(
                transaction_id=str(member.transaction_id),
                agent_id=member.agent_id,
            ):
                outcomes.append(
                    self.dispatch_one(session, claimed.batch.batch_id, member)
                )
        return tuple(outcomes)

    def dispatch_one(
        self,
        session: Session,
        batch_id: UUID,
        member: PrivateTransaction,
    ) -> DispatchOutcome:
        """Call one target and record its outcome. Never raises."""
        start = time.monotonic()
        try:
            response = self._client.send(
                member.target_endpoint, member.request_payload,
            )
        except Exception as exc:
            duration_ms = int((time.monotonic() - start) * 1000)
            logger.warning(
                "dispatch_failed",
                extra={
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                    "duration_ms": duration_ms,
                },
            )
            result = TransactionResult(
                transaction_id=member.transaction_id,
                batch_id=batch_id,
                success=False,
                error_message=str(exc) or type(exc).__name__,
                executed_at=self._clock.now(),
            )
            return self._record(
                session, member, result, TransactionStatus.FAILED, duration_ms,
            )

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "dispatch_responded",
            extra={
                "status_code": response.status_code,
                "success": response.ok,
                "duration_ms": duration_ms,
            },
        )
        result = TransactionResult(
            transaction_id=member.transaction_id,
            batch_id=batch_id,
            success=response.ok,
            response_data=json.dumps(response.body),
            status_code=response.status_code,
            executed_at=self._clock.now(),
        )
        return self._record(
            session, member, result, TransactionStatus.EXECUTED, duration_ms,
        )

    def _record(
        self,
        session: Session,
        member: PrivateTransaction,
        result: TransactionResult,
        new_status: TransactionStatus,
        duration_ms: int,
    ) -> DispatchOutcome:
        """Transition the member and store its result in one commit."""
        outcome = DispatchOutcome(
            transaction_id=member.transaction_id,
            status=new_status,
            success=result.success,
            status_code=result.status_code,
            error_message=result.error_message,
            duration_ms=duration_ms,
        )
        try:
            updated = session.execute(
                update(PrivateTransactionModel)
                .where(
                    PrivateTransactionModel.id == member.transaction_id,
                    PrivateTransactionModel.status == TransactionStatus.SELECTED.value,
                )
                .values(
                    status=new_status.value,
                    batch_id=result.batch_id,
                    executed_at=result.executed_at,
                )
                .execution_options(synchronize_session=False)
            ).rowcount
            if updated != 1:
                session.rollback()
                logger.warning(
                    "transaction_transition_rejected",
                    extra={"target_status": new_status.value},
                )
                return _unrecorded(outcome)

            session.add(TransactionResultModel.from_dto(result))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            error = PersistenceError("record_dispatch_outcome", str(exc))
            logger.error(
                "dispatch_record_failed",
                extra={
                    "error_code": error.code,
                    "operation": error.operation,
                    "detail": error.detail,
                },
            )
            return _unrecorded(outcome)

        return outcome


def _unrecorded(outcome: DispatchOutcome) -> DispatchOutcome:
    return DispatchOutcome(
        transaction_id=outcome.transaction_id,
        status=TransactionStatus.SELECTED,
        success=False,
        recorded=False,
        status_code=outcome.status_code,
        error_message=outcome.error_message,
        duration_ms=outcome.duration_ms,
    )
