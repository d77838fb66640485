"""
Seed Script — Creates demo users with a spread of alert preferences.

Usage:
    python -m neowatch.scripts.seed

Creates:
    5 users (daily, weekly, weekly+imminent, high threshold, never)
"""

import asyncio

from sqlalchemy import select

from neowatch.db.engine import build_engine, build_session_factory, close_db, init_db
from neowatch.config import settings
from neowatch.db.models import AlertPreference, User

DEMO_USERS = [
    # username, email, min_risk_score, email_frequency, notify_imminent
    ("daily_watcher", "daily@example.com", 50, "daily", True),
    ("weekly_digest", "weekly@example.com", 50, "weekly", False),
    ("weekly_imminent", "weekly-imminent@example.com", 40, "weekly", True),
    ("big_ones_only", "big@example.com", 85, "daily", False),
    ("muted", "muted@example.com", 50, "never", True),
]


async def seed() -> int:
    engine = build_engine(settings)
    await init_db(engine)
    created = 0
    async with build_session_factory(engine)() as session:
        for username, email, min_risk, frequency, imminent in DEMO_USERS:
            existing = await session.execute(select(User).where(User.email == email))
            if existing.scalar_one_or_none() is not None:
                continue
            user = User(email=email, username=username)
            user.alert_preference = AlertPreference(
                min_risk_score=min_risk,
                email_frequency=frequency,
                notify_imminent=imminent,
            )
            session.add(user)
            created += 1
        await session.commit()
    await close_db(engine)
    return created


if __name__ == "__main__":
    count = asyncio.run(seed())
    print(f"Seeded {count} users")
