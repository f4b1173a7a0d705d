"""
Scheduler tests. Intervals are tens of milliseconds so timing assertions
use generous lower bounds rather than exact counts.
"""
import asyncio
from unittest.mock import Mock

import pytest

from price_pulse.core.scheduler import JobKind, Scheduler


@pytest.mark.asyncio
class TestRecurring:
    """Recurring jobs."""

    async def test_recurring_fires_repeatedly(self):
        scheduler = Scheduler()
        task = Mock()

        scheduler.schedule_recurring("tick", 0.02, task)
        await asyncio.sleep(0.15)
        await scheduler.shutdown()

        assert task.call_count >= 3

    async def test_rescheduling_same_name_replaces_job(self):
        scheduler = Scheduler()
        f = Mock()
        g = Mock()

        scheduler.schedule_recurring("tick", 0.05, f)
        scheduler.schedule_recurring("tick", 0.02, g)
        await asyncio.sleep(0.2)

        assert scheduler.job_names() == ["tick"]
        assert scheduler.jobs["tick"].task is g
        await scheduler.shutdown()

        f.assert_not_called()
        assert g.call_count >= 2

    async def test_async_task_does_not_block_next_firing(self):
        scheduler = Scheduler()
        started = []

        async def slow_tick():
            started.append(asyncio.get_running_loop().time())
            await asyncio.sleep(0.2)

        scheduler.schedule_recurring("tick", 0.02, slow_tick)
        await asyncio.sleep(0.13)
        await scheduler.shutdown(wait_for_running=True)

        assert len(started) >= 3

    async def test_failing_task_keeps_timer_running(self):
        scheduler = Scheduler()
        task = Mock(side_effect=RuntimeError("boom"))

        scheduler.schedule_recurring("tick", 0.02, task)
        await asyncio.sleep(0.13)

        assert scheduler.has_job("tick")
        await scheduler.shutdown()
        assert task.call_count >= 3

    async def test_failing_async_task_keeps_timer_running(self):
        scheduler = Scheduler()
        calls = []

        async def broken():
            calls.append(1)
            raise RuntimeError("boom")

        scheduler.schedule_recurring("tick", 0.02, broken)
        await asyncio.sleep(0.13)
        await scheduler.shutdown(wait_for_running=True)

        assert len(calls) >= 3

    async def test_non_positive_interval_rejected(self):
        scheduler = Scheduler()
        with pytest.raises(ValueError):
            scheduler.schedule_recurring("tick", 0, Mock())
        assert scheduler.job_names() == []


@pytest.mark.asyncio
class TestOnce:
    """One-shot jobs."""

    async def test_once_fires_once_and_is_removed(self):
        scheduler = Scheduler()
        task = Mock()

        job = scheduler.schedule_once("boot", 0.01, task)
        assert job.kind is JobKind.ONCE
        assert scheduler.has_job("boot")

        await asyncio.sleep(0.1)

        task.assert_called_once()
        assert not scheduler.has_job("boot")
        await scheduler.shutdown()

    async def test_once_replaced_before_firing(self):
        scheduler = Scheduler()
        first = Mock()
        second = Mock()

        scheduler.schedule_once("boot", 0.05, first)
        scheduler.schedule_once("boot", 0.01, second)
        await asyncio.sleep(0.12)

        first.assert_not_called()
        second.assert_called_once()
        await scheduler.shutdown()

    async def test_negative_delay_rejected(self):
        scheduler = Scheduler()
        with pytest.raises(ValueError):
            scheduler.schedule_once("boot", -1, Mock())


@pytest.mark.asyncio
class TestCancel:
    """Cancellation."""

    async def test_cancel_stops_future_firings(self):
        scheduler = Scheduler()
        task = Mock()

        scheduler.schedule_recurring("tick", 0.02, task)
        await asyncio.sleep(0.07)
        assert scheduler.cancel("tick") is True
        count = task.call_count
        await asyncio.sleep(0.08)

        assert task.call_count == count
        assert not scheduler.has_job("tick")

    async def test_cancel_unknown_job_is_noop(self):
        scheduler = Scheduler()
        assert scheduler.cancel("missing") is False

    async def test_cancel_once_before_firing(self):
        scheduler = Scheduler()
        task = Mock()

        scheduler.schedule_once("boot", 0.03, task)
        scheduler.cancel("boot")
        await asyncio.sleep(0.08)

        task.assert_not_called()

    async def test_cancel_does_not_interrupt_running_invocation(self):
        scheduler = Scheduler()
        finished = asyncio.Event()

        async def tick():
            await asyncio.sleep(0.05)
            finished.set()

        scheduler.schedule_recurring("tick", 0.01, tick)
        await asyncio.sleep(0.025)
        scheduler.cancel("tick")

        await asyncio.wait_for(finished.wait(), timeout=1.0)
        assert finished.is_set()
        await scheduler.shutdown(wait_for_running=True)

    async def test_shutdown_cancels_every_job(self):
        scheduler = Scheduler()
        a = Mock()
        b = Mock()
        scheduler.schedule_recurring("a", 0.05, a)
        scheduler.schedule_once("b", 0.05, b)

        await scheduler.shutdown()
        await asyncio.sleep(0.1)

        assert scheduler.job_names() == []
        a.assert_not_called()
        b.assert_not_called()
