"""
Named recurring and one-shot jobs on the asyncio event loop.

Timers never wait for the work they trigger: a coroutine returned by a task
is spawned as its own asyncio task, so a slow invocation cannot delay the
next firing. Cancelling a job stops future firings only; invocations already
running are left to finish.
"""
import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

JobTask = Callable[[], Any]


class JobKind(Enum):
    RECURRING = "recurring"
    ONCE = "once"


@dataclass
class Job:
    """A registered job and the timer task driving it."""
    name: str
    kind: JobKind
    period: float
    task: JobTask
    timer: Optional[asyncio.Task] = None
    fire_count: int = 0


class Scheduler:
    """Owns named timers. Must be used from inside a running event loop."""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self._invocations: Set[asyncio.Task] = set()

    def schedule_recurring(self, name: str, interval: float, task: JobTask) -> Job:
        """
        Invoke task every interval seconds until cancelled.

        Any job already registered under name is cancelled first.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        return self._register(name, JobKind.RECURRING, interval, task)

    def schedule_once(self, name: str, delay: float, task: JobTask) -> Job:
        """Invoke task once after delay seconds; the job is removed after firing."""
        if delay < 0:
            raise ValueError("delay must not be negative")
        return self._register(name, JobKind.ONCE, delay, task)

    def cancel(self, name: str) -> bool:
        """Stop and remove the named job. Returns False if no such job."""
        job = self.jobs.pop(name, None)
        if job is None:
            return False
        if job.timer and not job.timer.done():
            job.timer.cancel()
        logger.info(f"Job cancelled: {name}")
        return True

    def has_job(self, name: str) -> bool:
        return name in self.jobs

    def job_names(self) -> List[str]:
        return sorted(self.jobs)

    async def shutdown(self, wait_for_running: bool = False):
        """
        Cancel every job.

        Args:
            wait_for_running: Also wait for invocations already in progress
        """
        timers = [job.timer for job in self.jobs.values() if job.timer]
        for name in list(self.jobs):
            self.cancel(name)
        if timers:
            await asyncio.gather(*timers, return_exceptions=True)
        if wait_for_running and self._invocations:
            await asyncio.gather(*list(self._invocations), return_exceptions=True)

    def _register(self, name: str, kind: JobKind, period: float, task: JobTask) -> Job:
        if name in self.jobs:
            logger.info(f"Replacing existing job: {name}")
            self.cancel(name)

        job = Job(name=name, kind=kind, period=period, task=task)
        if kind is JobKind.RECURRING:
            job.timer = asyncio.create_task(self._run_recurring(job), name=f"job:{name}")
        else:
            job.timer = asyncio.create_task(self._run_once(job), name=f"job:{name}")
        self.jobs[name] = job
        logger.info(f"Job scheduled: {name} ({kind.value}, {period}s)")
        return job

    async def _run_recurring(self, job: Job):
        while True:
            await asyncio.sleep(job.period)
            if self.jobs.get(job.name) is not job:
                return
            self._fire(job)

    async def _run_once(self, job: Job):
        await asyncio.sleep(job.period)
        if self.jobs.get(job.name) is not job:
            return
        del self.jobs[job.name]
        self._fire(job)

    def _fire(self, job: Job):
        job.fire_count += 1
        try:
            result = job.task()
        except Exception as e:
            logger.error(f"Error in job {job.name}: {e}", exc_info=True)
            return

        if inspect.isawaitable(result):
            invocation = asyncio.ensure_future(result)
            self._invocations.add(invocation)
            invocation.add_done_callback(lambda t: self._on_invocation_done(job.name, t))

    def _on_invocation_done(self, name: str, invocation: asyncio.Future):
        self._invocations.discard(invocation)
        if invocation.cancelled():
            return
        error = invocation.exception()
        if error is not None:
            logger.error(f"Error in job {name}: {error}", exc_info=error)
