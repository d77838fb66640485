"""
Risk Analysis Job — daily threat check and per-user notification.

Steps:
1. Reference date and weekday in the configured timezone
2. Threats = risk_score > 1 AND approach_date == today
3. No threats → stop (no preference lookups, no email)
4. For each active user: match → at most one dispatch

Error isolation: if one user's dispatch fails, the others still run.
"""

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Optional

import structlog

from neowatch.alerting.dispatcher import NotificationDispatcher
from neowatch.alerting.matcher import match_preference
from neowatch.alerting.schemas import NotifyWith
from neowatch.errors import DispatchError
from neowatch.stores.hazards import HazardStore
from neowatch.stores.preferences import PreferenceStore

logger = structlog.get_logger(__name__)


@dataclass
class AnalysisResult:
    reference_date: str
    threats: int = 0
    users_evaluated: int = 0
    notified: int = 0
    skipped: int = 0
    failed: int = 0


class RiskAnalysisJob:
    def __init__(
        self,
        hazards: HazardStore,
        preferences: PreferenceStore,
        dispatcher: NotificationDispatcher,
        tz: tzinfo = timezone.utc,
    ):
        self.hazards = hazards
        self.preferences = preferences
        self.dispatcher = dispatcher
        self.tz = tz

    async def run(self, now: Optional[datetime] = None) -> AnalysisResult:
        now = (now or datetime.now(self.tz)).astimezone(self.tz)
        today = now.date()
        weekday = today.weekday()
        result = AnalysisResult(reference_date=today.isoformat())

        threats = await self.hazards.query_threats(today)
        if not threats:
            logger.info("no_threats_today", reference_date=result.reference_date)
            return result

        result.threats = len(threats)
        logger.warning("threats_found", count=len(threats), reference_date=result.reference_date)

        users = await self.preferences.list_active()
        for pref in users:
            result.users_evaluated += 1
            decision = match_preference(threats, pref, weekday)

            if not isinstance(decision, NotifyWith):
                result.skipped += 1
                logger.debug("user_skipped", user_id=pref.user_id, reason=decision.reason)
                continue

            logger.info(
                "alert_triggered",
                user_id=pref.user_id,
                threshold=pref.min_risk_score,
                frequency=pref.email_frequency.value,
                risk_score=decision.threat.risk_score,
                imminent=decision.imminent,
            )
            try:
                await self.dispatcher.dispatch(
                    pref.email, pref.username, decision.threat, imminent=decision.imminent
                )
                result.notified += 1
            except DispatchError as e:
                result.failed += 1
                logger.error("dispatch_failed", user_id=pref.user_id, error=str(e))
            except Exception as e:
                result.failed += 1
                logger.error(
                    "dispatch_unexpected_error",
                    user_id=pref.user_id,
                    error=str(e),
                    exc_info=True,
                )

        logger.info(
            "risk_analysis_completed",
            reference_date=result.reference_date,
            threats=result.threats,
            users=result.users_evaluated,
            notified=result.notified,
            skipped=result.skipped,
            failed=result.failed,
        )
        return result
