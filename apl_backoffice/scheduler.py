"""
In-process job scheduler

One SchedulerService is created at startup and owned by the application.
Schedules live in memory only: nothing is persisted across restarts and
ticks missed while the process was down are not replayed.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import SCHEDULER_TIMEZONE

logger = logging.getLogger(__name__)

Task = Callable[[], Union[Any, Awaitable[Any]]]


class SchedulerService:
    def __init__(self, timezone: str = SCHEDULER_TIMEZONE):
        self.timezone = timezone
        self._scheduler = AsyncIOScheduler(timezone=timezone)
        self._jobs: dict[str, Job] = {}
        self._tasks: dict[str, Callable[[], Awaitable[Any]]] = {}
        # AsyncIOScheduler may finish shutting down on a later loop iteration
        self._stopping = False

    @property
    def running(self) -> bool:
        return self._scheduler.running and not self._stopping

    @property
    def job_names(self) -> list[str]:
        return sorted(self._jobs)

    def start(self) -> None:
        """Start firing registered jobs. Must be called from a running event loop."""
        if self.running:
            logger.info("Scheduler already running, skipping start")
            return
        if self._stopping:
            raise RuntimeError("Scheduler was stopped; create a new SchedulerService")
        self._scheduler.start()
        logger.info(f"⏱️ Scheduler started with jobs: {', '.join(self.job_names) or 'none'}")

    def _wrap(self, name: str, task: Task) -> Callable[[], Awaitable[Any]]:
        """Errors are logged and swallowed so one failing run never stops the schedule"""

        async def run_safely():
            logger.info(f"▶️ Running scheduled job: {name}")
            try:
                result = task()
                if inspect.isawaitable(result):
                    result = await result
                logger.info(f"✅ Scheduled job {name} finished: {result}")
                return result
            except Exception as e:
                logger.error(f"❌ Scheduled job {name} failed: {e}", exc_info=True)
                return None

        run_safely.__name__ = f"job_{name}"
        return run_safely

    def schedule_job(self, name: str, cron_expression: str, task: Task) -> Job:
        """
        Register a named recurring task from a five-field crontab expression.
        A job already registered under the same name is stopped and replaced.
        """
        trigger = CronTrigger.from_crontab(cron_expression, timezone=self.timezone)

        if name in self._jobs:
            logger.info(f"🔄 Replacing scheduled job: {name}")
            self._stop_job(name)

        wrapped = self._wrap(name, task)
        job = self._scheduler.add_job(
            wrapped,
            trigger=trigger,
            id=name,
            name=name,
            replace_existing=True,
            max_instances=1,  # A job never overlaps with itself
            coalesce=True,
        )
        self._jobs[name] = job
        self._tasks[name] = wrapped
        logger.info(f"📅 Job scheduled: {name} ({cron_expression})")
        return job

    def _stop_job(self, name: str) -> None:
        job = self._jobs.pop(name, None)
        self._tasks.pop(name, None)
        if job is None:
            return
        try:
            job.remove()
        except Exception as e:
            # JobLookupError when the scheduler already dropped it
            logger.debug(f"Job {name} already removed: {e}")

    def run_soon(self, name: str) -> Optional[Job]:
        """Queue a one-off run of a registered job on the scheduler, outside its cron schedule"""
        wrapped = self._tasks.get(name)
        if wrapped is None:
            logger.warning(f"⚠️ Cannot run unknown job: {name}")
            return None
        return self._scheduler.add_job(wrapped, trigger="date", id=f"{name}:once", replace_existing=True)

    async def run_job(self, name: str) -> Any:
        """Run a registered job now and wait for it"""
        wrapped = self._tasks.get(name)
        if wrapped is None:
            raise KeyError(f"Unknown job: {name}")
        return await wrapped()

    def stop_all_jobs(self) -> None:
        """Cancel every registered job and stop the scheduler"""
        for name in list(self._jobs):
            self._stop_job(name)
        if self._scheduler.running and not self._stopping:
            self._stopping = True
            self._scheduler.shutdown(wait=False)
        logger.info("🛑 All scheduled jobs stopped")
