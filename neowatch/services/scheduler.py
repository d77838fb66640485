"""
Trigger Manager — runs the refresh and analysis jobs on their own schedules.

Jobs:
1. Hazard refresh (REFRESH_CRON, default every 4 hours)
2. Risk analysis (ANALYSIS_CRON, default 09:00 daily)
3. Bootstrap refresh at startup when the hazard store is empty

Each firing is an isolated unit: it holds its kind's JobGuard token while
running, catches every exception at its own boundary, and never affects
other firings. A firing that finds its kind still running is skipped.
Different kinds may overlap; the analysis job can see a store that a
concurrent refresh has only partly updated (each record is atomic).
"""

from dataclasses import dataclass
from datetime import timezone, tzinfo
from enum import StrEnum
from typing import Awaitable, Callable, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger

from neowatch.jobs.analysis import RiskAnalysisJob
from neowatch.jobs.refresh import DataRefreshJob
from neowatch.stores.hazards import HazardStore

logger = structlog.get_logger(__name__)


class JobKind(StrEnum):
    REFRESH = "hazard_refresh"
    ANALYSIS = "risk_analysis"


class JobState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"


class JobOutcome(StrEnum):
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class JobGuard:
    """
    Per-kind re-entrancy token.

    try_acquire is a compare-and-set (IDLE → RUNNING) with no await in
    between, so it is atomic on the event loop.
    """

    def __init__(self):
        self._states: dict[JobKind, JobState] = {kind: JobState.IDLE for kind in JobKind}

    def state(self, kind: JobKind) -> JobState:
        return self._states[kind]

    def try_acquire(self, kind: JobKind) -> bool:
        if self._states[kind] is not JobState.IDLE:
            return False
        self._states[kind] = JobState.RUNNING
        return True

    def release(self, kind: JobKind) -> None:
        self._states[kind] = JobState.IDLE


@dataclass(frozen=True)
class ScheduledJob:
    kind: JobKind
    trigger: BaseTrigger
    handler: Callable[[], Awaitable[object]]


class TriggerManager:
    """
    Background scheduler for the hazard refresh and risk analysis jobs.

    Runs in its own process, NOT inside any web server.
    """

    def __init__(
        self,
        refresh_job: DataRefreshJob,
        analysis_job: RiskAnalysisJob,
        hazards: HazardStore,
        refresh_cron: str = "0 */4 * * *",
        analysis_cron: str = "0 9 * * *",
        tz: tzinfo = timezone.utc,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.hazards = hazards
        self.guard = JobGuard()
        self.scheduler = scheduler or AsyncIOScheduler(timezone=tz)
        self.jobs: dict[JobKind, ScheduledJob] = {
            JobKind.REFRESH: ScheduledJob(
                kind=JobKind.REFRESH,
                trigger=CronTrigger.from_crontab(refresh_cron, timezone=tz),
                handler=refresh_job.run,
            ),
            JobKind.ANALYSIS: ScheduledJob(
                kind=JobKind.ANALYSIS,
                trigger=CronTrigger.from_crontab(analysis_cron, timezone=tz),
                handler=analysis_job.run,
            ),
        }

    async def run_job(self, kind: JobKind) -> JobOutcome:
        """Run one firing of ``kind`` inside its guard and error boundary."""
        if not self.guard.try_acquire(kind):
            logger.warning("job_skipped_already_running", job=kind.value)
            return JobOutcome.SKIPPED

        try:
            await self.jobs[kind].handler()
            return JobOutcome.COMPLETED
        except Exception as e:
            logger.error("job_failed", job=kind.value, error=str(e), exc_info=True)
            return JobOutcome.FAILED
        finally:
            self.guard.release(kind)

    async def bootstrap(self) -> bool:
        """Run one refresh before any periodic firing if the store is empty."""
        try:
            count = await self.hazards.count()
        except Exception as e:
            logger.error("bootstrap_count_failed", error=str(e))
            return False

        if count > 0:
            logger.info("bootstrap_skipped", hazards=count)
            return False

        logger.info("bootstrap_refresh_started", reason="empty hazard store")
        await self.run_job(JobKind.REFRESH)
        return True

    def start(self) -> None:
        """Register both triggers and start the scheduler."""
        for job in self.jobs.values():
            # Overlap is handled by JobGuard (logged skip), not by APScheduler
            self.scheduler.add_job(
                self.run_job,
                job.trigger,
                args=[job.kind],
                id=job.kind.value,
                max_instances=3,
                coalesce=True,
                misfire_grace_time=300,
                replace_existing=True,
            )
        self.scheduler.start()
        logger.info(
            "trigger_manager_started",
            jobs={kind.value: str(job.trigger) for kind, job in self.jobs.items()},
        )

    def stop(self) -> None:
        """Gracefully stop the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
        logger.info("trigger_manager_stopped")
