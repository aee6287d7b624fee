"""
Application factory.

``create_app()`` wires a PoolOrchestrator into a FastAPI app.  With
``start_scheduler=True`` the batch scheduler runs for the lifetime of the
app; otherwise cycles are driven externally (CLI, tests).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request

from darkpool_batch.orchestrator import PoolOrchestrator
from darkpool_config.loader import load_config
from darkpool_config.schema import PoolConfig
from darkpool_kernel import __version__
from darkpool_kernel.logging_config import LogContext, get_logger

from darkpool_api.errors import register_error_handlers
from darkpool_api.routes import router

logger = get_logger("api")

CORRELATION_HEADER = "X-Correlation-ID"
_MAX_CORRELATION_ID_LENGTH = 64


def create_app(
    orchestrator: PoolOrchestrator | None = None,
    config: PoolConfig | None = None,
    start_scheduler: bool = False,
) -> FastAPI:
    """Build the HTTP app.

    Args:
        orchestrator: Pre-wired orchestrator (tests pass one with an
            in-memory session factory and a fake target client).
        config: Used to build an orchestrator when none is given;
            defaults to ``load_config()``.
        start_scheduler: Run the batch scheduler inside the app lifespan.
    """
    if orchestrator is None:
        orchestrator = PoolOrchestrator.from_config(config or load_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = orchestrator.create_scheduler() if start_scheduler else None
        if scheduler is not None:
            scheduler.start()
        logger.info(
            "api_started",
            extra={
                "service": orchestrator.config.service_name,
                "scheduler": scheduler is not None,
            },
        )
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()
            logger.info("api_stopped")

    app = FastAPI(
        title="Agent Dark Pool",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    @app.middleware("http")
    async def bind_correlation_id(request: Request, call_next):
        """Tag every log line of a request with one correlation id."""
        correlation_id = request.headers.get(CORRELATION_HEADER, "")
        if not correlation_id or len(correlation_id) > _MAX_CORRELATION_ID_LENGTH:
            correlation_id = uuid4().hex
        with LogContext.bind(correlation_id=correlation_id):
            response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    register_error_handlers(app)
    app.include_router(router)
    return app
