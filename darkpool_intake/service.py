"""
IntakeService -- validate, price, and queue a submission.

Contract:
    ``submit()`` validates the raw submission, computes the privacy fee,
    assigns a new id, and inserts one ``pending`` transaction.  The new row
    is visible to the batch selector on its next read; nothing is notified.

Non-goals:
    - Does NOT call ``session.commit()`` -- the caller controls boundaries.
    - Does NOT deduplicate submissions.

Failure modes:
    - ValidationError: malformed submission; nothing is added to the session.
    - PersistenceError: the insert failed at flush time.
"""

from __future__ import annotations

import json
from typing import Any, Mapping
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from darkpool_config.schema import PoolConfig
from darkpool_kernel.domain.clock import Clock, SystemClock
from darkpool_kernel.domain.fees import calculate_privacy_fee, calculate_total_cost
from darkpool_kernel.domain.types import (
    PrivateTransaction,
    SubmissionReceipt,
    TransactionStatus,
)
from darkpool_kernel.exceptions import PersistenceError, ValidationError
from darkpool_kernel.logging_config import LogContext, get_logger
from darkpool_kernel.models.transaction import PrivateTransactionModel

from darkpool_intake.validators import parse_payment_amount, validate_submission

logger = get_logger("intake")


class IntakeService:
    """Accepts submissions into the private pending queue."""

    def __init__(
        self,
        session: Session,
        config: PoolConfig,
        clock: Clock | None = None,
    ):
        self._session = session
        self._config = config
        self._clock = clock or SystemClock()

    def submit(self, submission: Mapping[str, Any]) -> SubmissionReceipt:
        """Queue one transaction.

        Raises:
            ValidationError: If any field is missing or malformed.
            PersistenceError: If the insert fails.
        """
        errors = validate_submission(submission)
        if errors:
            logger.info(
                "submission_rejected",
                extra={"errors": [e.code for e in errors]},
            )
            raise ValidationError(errors)

        amount = parse_payment_amount(submission["payment_amount"])
        premium = self._config.privacy_premium_percent
        fee = calculate_privacy_fee(amount, premium)
        total = calculate_total_cost(amount, fee)

        dto = PrivateTransaction(
            transaction_id=uuid4(),
            agent_id=submission["agent_id"].strip(),
            target_endpoint=submission["target_endpoint"].strip(),
            request_payload=json.dumps(submission["request_payload"]),
            payment_amount=amount,
            privacy_fee=fee,
            status=TransactionStatus.PENDING,
            created_at=self._clock.now(),
        )

        model = PrivateTransactionModel.from_dto(dto)
        try:
            self._session.add(model)
            self._session.flush()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception(
                "submission_persist_failed",
                extra={"transaction_id": str(dto.transaction_id)},
            )
            raise PersistenceError("insert_transaction", str(exc)) from exc

        with LogContext.bind(
            transaction_id=str(dto.transaction_id), agent_id=dto.agent_id,
        ):
            logger.info(
                "transaction_submitted",
                extra={
                    "payment_amount": amount,
                    "privacy_fee": fee,
                    "premium_percent": premium,
                },
            )

        return SubmissionReceipt(
            transaction_id=dto.transaction_id,
            status=TransactionStatus.PENDING,
            privacy_fee=fee,
            total_cost=total,
            estimated_execution_seconds=self._config.batch_window_seconds,
        )
