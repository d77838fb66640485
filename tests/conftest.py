"""
Test fixtures for NeoWatch.

Provides:
- Async DB engine/session factory (in-memory SQLite, fresh per test)
- Hazard and preference stores bound to it
- Fake feed and recording email sender
- Factories for threats, feed records and users
"""

from datetime import date
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from neowatch.alerting.schemas import Threat, ThreatSummary
from neowatch.db.engine import Base
from neowatch.db.models import AlertPreference, HazardObject, User  # noqa: F401 — register all models
from neowatch.errors import DispatchError, FetchError
from neowatch.feed.schemas import RawHazardRecord
from neowatch.stores.hazards import HazardStore
from neowatch.stores.preferences import PreferenceStore

TEST_DB_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database with all tables."""
    eng = create_async_engine(TEST_DB_URL, poolclass=StaticPool, echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def hazard_store(session_factory) -> HazardStore:
    return HazardStore(session_factory)


@pytest.fixture
def preference_store(session_factory) -> PreferenceStore:
    return PreferenceStore(session_factory)


# ── Fakes ────────────────────────────────────────────────────────────────


class FakeFeed:
    """Feed double: returns fixed records or raises FetchError."""

    def __init__(self, records: Optional[list[RawHazardRecord]] = None, error: Optional[str] = None):
        self.records = records or []
        self.error = error
        self.calls = 0

    async def fetch_all(self) -> list[RawHazardRecord]:
        self.calls += 1
        if self.error:
            raise FetchError(self.error)
        return list(self.records)


class RecordingSender:
    """Email sender double: records every send, fails for chosen addresses."""

    def __init__(self, fail_for: tuple[str, ...] = ()):
        self.fail_for = set(fail_for)
        self.sent: list[tuple[str, str, ThreatSummary]] = []

    async def send(self, to_address: str, display_name: str, summary: ThreatSummary) -> None:
        if to_address in self.fail_for:
            raise DispatchError(f"mailbox unavailable: {to_address}")
        self.sent.append((to_address, display_name, summary))


@pytest.fixture
def recording_sender() -> RecordingSender:
    return RecordingSender()


# ── Factories ────────────────────────────────────────────────────────────


@pytest.fixture
def make_threat():
    counter = {"n": 0}

    def _make(risk_score: int, approach_date: date = date(2026, 10, 20), **kwargs) -> Threat:
        counter["n"] += 1
        return Threat(
            external_id=kwargs.pop("external_id", f"neo-{counter['n']}"),
            name=kwargs.pop("name", f"Test Object {counter['n']}"),
            risk_score=risk_score,
            approach_date=approach_date,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_record():
    def _make(external_id: str, approach_date: date, **kwargs) -> RawHazardRecord:
        values = {
            "name": f"({external_id})",
            "is_hazardous": False,
            "diameter_m": 300.0,
            "velocity_kph": 60_000.0,
            "miss_distance_km": 1_000_000.0,
        }
        values.update(kwargs)
        return RawHazardRecord(external_id=external_id, approach_date=approach_date, **values)

    return _make


@pytest.fixture
def create_user(session_factory):
    async def _create(
        username: str,
        min_risk_score: Optional[int] = 50,
        email_frequency: str = "daily",
        notify_imminent: bool = True,
        with_preference: bool = True,
    ) -> User:
        async with session_factory() as session:
            user = User(email=f"{username}@test.com", username=username)
            if with_preference:
                user.alert_preference = AlertPreference(
                    min_risk_score=min_risk_score,
                    email_frequency=email_frequency,
                    notify_imminent=notify_imminent,
                )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _create


@pytest.fixture
def feed_factory():
    return FakeFeed


@pytest.fixture
def sender_factory():
    return RecordingSender
