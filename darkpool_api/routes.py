"""HTTP routes: submit, status, batch, stats, health."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from darkpool_batch.orchestrator import PoolOrchestrator
from darkpool_kernel.exceptions import PersistenceError

from darkpool_api.dependencies import get_db, get_orchestrator
from darkpool_api.schemas import (
    BatchResponse,
    ErrorResponse,
    HealthResponse,
    StatsResponse,
    SubmitResponse,
    TransactionStatusResponse,
)

router = APIRouter()


@router.post(
    "/submit",
    response_model=SubmitResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def submit_transaction(
    body: Any = Body(...),
    session: Session = Depends(get_db),
    orchestrator: PoolOrchestrator = Depends(get_orchestrator),
):
    receipt = orchestrator.create_intake(session).submit(body)
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise PersistenceError("commit_transaction", str(exc)) from exc
    return SubmitResponse.from_receipt(receipt)


@router.get(
    "/status/{transaction_id}",
    response_model=TransactionStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_transaction_status(
    transaction_id: str,
    session: Session = Depends(get_db),
    orchestrator: PoolOrchestrator = Depends(get_orchestrator),
):
    view = orchestrator.create_selector(session).get_transaction(transaction_id)
    return TransactionStatusResponse.from_view(view)


@router.get(
    "/batch/{batch_id}",
    response_model=BatchResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_batch(
    batch_id: str,
    session: Session = Depends(get_db),
    orchestrator: PoolOrchestrator = Depends(get_orchestrator),
):
    view = orchestrator.create_selector(session).get_batch(batch_id)
    return BatchResponse.from_view(view)


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    session: Session = Depends(get_db),
    orchestrator: PoolOrchestrator = Depends(get_orchestrator),
):
    view = orchestrator.create_selector(session).get_stats_view(
        orchestrator.clock.today()
    )
    return StatsResponse.from_view(view)


@router.get("/health", response_model=HealthResponse)
def health(orchestrator: PoolOrchestrator = Depends(get_orchestrator)):
    return HealthResponse(service=orchestrator.config.service_name)
