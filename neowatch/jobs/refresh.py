"""
Data Refresh Job — pulls the feed and upserts scored hazard objects.

Failure policy:
- FetchError: logged, store untouched, no retry (next firing retries)
- PersistenceError: propagates; the run is aborted and reported as failed
"""

from dataclasses import dataclass
from typing import Protocol

import structlog

from neowatch.errors import FetchError
from neowatch.feed.risk import to_hazard_fields
from neowatch.feed.schemas import RawHazardRecord
from neowatch.stores.hazards import (
    UPSERT_INSERTED,
    UPSERT_UNCHANGED,
    UPSERT_UPDATED,
    HazardStore,
)

logger = structlog.get_logger(__name__)


class HazardFeed(Protocol):
    async def fetch_all(self) -> list[RawHazardRecord]:
        ...


@dataclass
class RefreshResult:
    fetched: int = 0
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    fetch_failed: bool = False


class DataRefreshJob:
    def __init__(self, feed: HazardFeed, store: HazardStore):
        self.feed = feed
        self.store = store

    async def run(self) -> RefreshResult:
        logger.info("hazard_refresh_started")
        try:
            records = await self.feed.fetch_all()
        except FetchError as e:
            logger.error("hazard_feed_fetch_failed", error=str(e))
            return RefreshResult(fetch_failed=True)

        counts = await self.store.upsert_many(
            (record.external_id, to_hazard_fields(record)) for record in records
        )
        result = RefreshResult(
            fetched=len(records),
            inserted=counts[UPSERT_INSERTED],
            updated=counts[UPSERT_UPDATED],
            unchanged=counts[UPSERT_UNCHANGED],
        )
        logger.info(
            "hazard_refresh_completed",
            fetched=result.fetched,
            inserted=result.inserted,
            updated=result.updated,
            unchanged=result.unchanged,
        )
        return result
