"""Request-scoped dependencies."""

from __future__ import annotations

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from darkpool_batch.orchestrator import PoolOrchestrator


def get_orchestrator(request: Request) -> PoolOrchestrator:
    return request.app.state.orchestrator


def get_db(request: Request) -> Generator[Session, None, None]:
    """One session per request; committed if the handler returns normally."""
    session = get_orchestrator(request).session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
