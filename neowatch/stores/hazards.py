"""
Hazard Store — upsert-by-external-id persistence for hazard objects.

Each upsert runs in its own transaction, so every record is atomic on its
own and a concurrent reader sees either the old or the new row, never a
half-written one. There are no multi-record transactions.
"""

from datetime import date
from typing import Iterable

import structlog
from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from neowatch.alerting.schemas import Threat
from neowatch.db.models import HazardObject
from neowatch.errors import PersistenceError

logger = structlog.get_logger(__name__)

# Minimal significance floor for a threat (strictly greater than)
THREAT_RISK_FLOOR = 1

UPSERT_INSERTED = "inserted"
UPSERT_UPDATED = "updated"
UPSERT_UNCHANGED = "unchanged"


class HazardStore:
    """Persists hazard objects keyed by upstream id."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def upsert(self, external_id: str, fields: dict) -> str:
        """
        Insert or update one hazard object.

        Only columns whose value actually changed are written, so replaying
        identical data leaves the row untouched.
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(HazardObject).where(HazardObject.external_id == external_id)
                )
                existing = result.scalar_one_or_none()

                if existing is None:
                    session.add(HazardObject(external_id=external_id, **fields))
                    outcome = UPSERT_INSERTED
                else:
                    outcome = UPSERT_UNCHANGED
                    for key, value in fields.items():
                        if getattr(existing, key) != value:
                            setattr(existing, key, value)
                            outcome = UPSERT_UPDATED

                await session.commit()
                return outcome
        except SQLAlchemyError as e:
            raise PersistenceError(f"Upsert failed for {external_id}: {e}") from e

    async def upsert_many(self, items: Iterable[tuple[str, dict]]) -> dict[str, int]:
        """Upsert records one by one; the first failure aborts the rest."""
        counts = {UPSERT_INSERTED: 0, UPSERT_UPDATED: 0, UPSERT_UNCHANGED: 0}
        for external_id, fields in items:
            outcome = await self.upsert(external_id, fields)
            counts[outcome] += 1
        return counts

    async def query_threats(self, day: date) -> list[Threat]:
        """Objects approaching on ``day`` with risk above the floor, in store order."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(HazardObject)
                    .where(
                        and_(
                            HazardObject.risk_score > THREAT_RISK_FLOOR,
                            HazardObject.approach_date == day,
                        )
                    )
                    .order_by(HazardObject.id)
                )
                return [Threat.model_validate(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Threat query failed: {e}") from e

    async def count(self) -> int:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(func.count(HazardObject.id)))
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Hazard count failed: {e}") from e
