"""
Run one scheduled job immediately, outside the scheduler.

Usage:
    python -m neowatch.scripts.run_job refresh
    python -m neowatch.scripts.run_job analysis
"""

import argparse
import asyncio
from dataclasses import asdict

import structlog

from neowatch.config import settings
from neowatch.db.engine import build_engine, build_session_factory, close_db, init_db
from neowatch.logging_config import configure_logging
from neowatch.scheduler_main import build_runtime

logger = structlog.get_logger(__name__)


async def run(job: str) -> dict:
    engine = build_engine(settings)
    try:
        await init_db(engine)
        runtime = build_runtime(settings, build_session_factory(engine))
        if job == "refresh":
            result = await runtime.refresh_job.run()
        else:
            result = await runtime.analysis_job.run()
    finally:
        await close_db(engine)
    return asdict(result)


def main():
    parser = argparse.ArgumentParser(description="Run a NeoWatch job once")
    parser.add_argument("job", choices=["refresh", "analysis"])
    args = parser.parse_args()

    configure_logging()
    result = asyncio.run(run(args.job))
    logger.info("manual_job_finished", job=args.job, **result)


if __name__ == "__main__":
    main()
