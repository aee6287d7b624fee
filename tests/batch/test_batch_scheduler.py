"""Tests for darkpool_batch.services.scheduler -- tick and lifecycle."""

import time
from datetime import date

from darkpool_kernel.selectors import PoolSelector

from darkpool_batch.services.cycle import BatchCycle
from darkpool_batch.services.dispatcher import Dispatcher
from darkpool_batch.services.finalizer import BatchFinalizer
from darkpool_batch.services.scheduler import BatchScheduler
from darkpool_batch.services.selector import BatchSelector
from darkpool_batch.services.stats import StatsAggregator

from tests.support import FakeTargetClient


def _scheduler(session_factory, clock, client, interval=30):
    cycle = BatchCycle(
        session_factory=session_factory,
        selector=BatchSelector(10, clock=clock),
        dispatcher=Dispatcher(client, clock=clock),
        finalizer=BatchFinalizer(clock=clock),
        stats=StatsAggregator(clock=clock),
    )
    return BatchScheduler(cycle, interval_seconds=interval)


class TestTick:

    def test_tick_runs_one_cycle(self, session_factory, clock, submit):
        submit()
        submit()
        client = FakeTargetClient()

        result = _scheduler(session_factory, clock, client).tick()

        assert result.selected == 2
        assert result.completed is True
        assert len(client.calls) == 2

    def test_tick_with_empty_queue(self, session_factory, clock):
        result = _scheduler(session_factory, clock, FakeTargetClient()).tick()
        assert result.batch_id is None

    def test_tick_reconciles_before_selecting(self, session_factory, clock, submit):
        submit()
        with session_factory() as s:
            claimed = BatchSelector(10, clock=clock).select_and_claim(s)
            s.commit()
            Dispatcher(FakeTargetClient(), clock=clock).dispatch_batch(s, claimed)

        _scheduler(session_factory, clock, FakeTargetClient()).tick()

        with session_factory() as s:
            batch = PoolSelector(s).get_batch(claimed.batch.batch_id).batch
            stats = PoolSelector(s).get_stats(date(2024, 1, 1))
        assert batch.status.value == "completed"
        assert stats.total_transactions == 1


class TestLifecycle:

    def test_start_and_stop(self, session_factory, clock, submit):
        submit()
        client = FakeTargetClient()
        scheduler = _scheduler(session_factory, clock, client, interval=1)

        scheduler.start()
        try:
            assert scheduler.is_running is True
            deadline = time.monotonic() + 5
            while not client.calls and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            scheduler.stop(timeout=5)

        assert scheduler.is_running is False
        assert len(client.calls) == 1

    def test_start_twice_is_harmless(self, session_factory, clock):
        scheduler = _scheduler(session_factory, clock, FakeTargetClient(), interval=1)
        scheduler.start()
        try:
            thread = scheduler._thread
            scheduler.start()
            assert scheduler._thread is thread
        finally:
            scheduler.stop(timeout=5)

    def test_stop_without_start(self, session_factory, clock):
        scheduler = _scheduler(session_factory, clock, FakeTargetClient())
        scheduler.stop()
        assert scheduler.is_running is False

    def test_interval_exposed(self, session_factory, clock):
        assert _scheduler(session_factory, clock, FakeTargetClient(), 7).interval_seconds == 7
