"""
Preference Store — read-only view of users and their alert preferences.

Users without a stored preference row get the same defaults the
preferences API reports for them.
"""

import structlog
from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from neowatch.alerting.schemas import EmailFrequency, UserPreference
from neowatch.db.models import AlertPreference, User
from neowatch.errors import PersistenceError

logger = structlog.get_logger(__name__)


class PreferenceStore:
    """Lists preferences of users who want email at all."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_active(self) -> list[UserPreference]:
        """All users whose email_frequency is not ``never``, ordered by user id."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(User, AlertPreference)
                    .outerjoin(AlertPreference, AlertPreference.user_id == User.id)
                    .where(
                        or_(
                            AlertPreference.id.is_(None),
                            AlertPreference.email_frequency != EmailFrequency.NEVER.value,
                        )
                    )
                    .order_by(User.id)
                )
                rows = result.all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Preference query failed: {e}") from e

        preferences: list[UserPreference] = []
        for user, pref in rows:
            values = {"user_id": user.id, "email": user.email, "username": user.username}
            if pref is not None:
                values.update(
                    min_risk_score=pref.min_risk_score,
                    email_frequency=pref.email_frequency,
                    notify_imminent=pref.notify_imminent,
                )
            try:
                preferences.append(UserPreference(**values))
            except ValidationError as e:
                logger.warning("preference_invalid_skip", user_id=user.id, error=str(e))

        return preferences
