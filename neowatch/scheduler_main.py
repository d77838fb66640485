"""
Scheduler Entry Point.

Usage:
    python -m neowatch.scheduler_main

This does NOT run a web server. It runs the APScheduler background loop
for hazard refresh and daily risk analysis.
"""

import asyncio
import signal
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from neowatch.alerting.channels import build_email_sender
from neowatch.alerting.dispatcher import NotificationDispatcher
from neowatch.config import Settings, settings
from neowatch.db.engine import build_engine, build_session_factory, close_db, init_db
from neowatch.feed.client import NeoFeedClient
from neowatch.jobs.analysis import RiskAnalysisJob
from neowatch.jobs.refresh import DataRefreshJob
from neowatch.logging_config import configure_logging
from neowatch.services.scheduler import TriggerManager
from neowatch.stores.hazards import HazardStore
from neowatch.stores.preferences import PreferenceStore

logger = structlog.get_logger(__name__)


@dataclass
class Runtime:
    hazards: HazardStore
    preferences: PreferenceStore
    refresh_job: DataRefreshJob
    analysis_job: RiskAnalysisJob
    triggers: TriggerManager


def build_runtime(
    cfg: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> Runtime:
    """Wire stores, feed, dispatcher, jobs and triggers from settings."""
    tz = cfg.tzinfo
    hazards = HazardStore(session_factory)
    preferences = PreferenceStore(session_factory)
    feed = NeoFeedClient(
        feed_url=cfg.neo_feed_url,
        api_key=cfg.nasa_api_key,
        timeout=cfg.neo_feed_timeout_seconds,
        window_days=cfg.neo_feed_window_days,
        tz=tz,
    )
    dispatcher = NotificationDispatcher(build_email_sender(cfg))
    refresh_job = DataRefreshJob(feed, hazards)
    analysis_job = RiskAnalysisJob(hazards, preferences, dispatcher, tz=tz)
    triggers = TriggerManager(
        refresh_job,
        analysis_job,
        hazards,
        refresh_cron=cfg.refresh_cron,
        analysis_cron=cfg.analysis_cron,
        tz=tz,
    )
    return Runtime(hazards, preferences, refresh_job, analysis_job, triggers)


async def main():
    """Initialize and run the scheduler."""
    configure_logging()
    logger.info("scheduler_starting", version=settings.app_version)

    engine = build_engine(settings)
    await init_db(engine)
    runtime = build_runtime(settings, build_session_factory(engine))

    # Bootstrap refresh completes before the first periodic firing
    await runtime.triggers.bootstrap()
    runtime.triggers.start()

    stop_event = asyncio.Event()

    def _handle_signal(signum, frame):
        logger.info("shutdown_signal_received", signal=signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    logger.info("scheduler_running", msg="Waiting for jobs... Ctrl+C to stop.")
    await stop_event.wait()

    runtime.triggers.stop()
    await close_db(engine)
    logger.info("scheduler_shutdown_complete")


def run():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
