"""
Pytest fixtures for the dark pool test suite.

Provides:
- In-memory SQLite sessions (one shared connection via StaticPool)
- A DeterministicClock and a default PoolConfig
- A fake target client that records calls
- Structured-log capture
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import darkpool_kernel.models  # noqa: F401  (registers tables)
from darkpool_config.schema import PoolConfig
from darkpool_intake.service import IntakeService
from darkpool_kernel.db.base import Base
from darkpool_kernel.domain.clock import DeterministicClock
from darkpool_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

from tests.support import FakeTargetClient, make_submission


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture darkpool logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, cycle):
            cycle.run()
            logs = captured_logs()
            assert any(r["message"] == "batch_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("darkpool")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def config():
    return PoolConfig(database_url="sqlite://")


@pytest.fixture
def target_client():
    return FakeTargetClient()


@pytest.fixture
def submit(session_factory, config, clock):
    """Queue a transaction and commit it; the clock advances one second per call."""

    def _submit(**overrides):
        session = session_factory()
        try:
            receipt = IntakeService(session, config, clock=clock).submit(
                make_submission(**overrides)
            )
            session.commit()
        finally:
            session.close()
        clock.advance(1)
        return receipt

    return _submit
