"""
Notification Dispatcher — formats one threat alert and sends it.

Called sequentially by the risk analysis job, one user at a time.
"""

from typing import Optional

import structlog

from neowatch.alerting.channels import EmailSender
from neowatch.alerting.schemas import Threat, ThreatSummary
from neowatch.feed.risk import hazard_level

logger = structlog.get_logger(__name__)

LEVEL_LABELS = {
    2: "CRITICAL",
    1: "ELEVATED",
    0: "LOW",
}


def _fmt(value: Optional[float], unit: str, precision: int = 0) -> str:
    if value is None:
        return "unknown"
    return f"{value:,.{precision}f} {unit}"


def format_threat_summary(display_name: str, threat: Threat, imminent: bool = False) -> ThreatSummary:
    """Render the subject and plain-text body for one threat."""
    level = LEVEL_LABELS[hazard_level(threat.risk_score, threat.is_hazardous)]
    name = threat.name or threat.external_id
    subject = f"[NeoWatch {level}] {name} approaches Earth today (risk {threat.risk_score}/100)"

    greeting = f"Hello {display_name}," if display_name else "Hello,"
    intro = (
        "No object crossed your alert threshold today, but this is the "
        "highest-risk close approach we are tracking:"
        if imminent
        else "An object matching your alert preferences approaches Earth today:"
    )
    body = (
        f"{greeting}\n\n"
        f"{intro}\n\n"
        f"{'=' * 50}\n"
        f"Object:          {name} ({threat.external_id})\n"
        f"Risk score:      {threat.risk_score}/100 ({level})\n"
        f"Potentially hazardous: {'yes' if threat.is_hazardous else 'no'}\n"
        f"Approach date:   {threat.approach_date.isoformat()}\n"
        f"Est. diameter:   {_fmt(threat.diameter_m, 'm')}\n"
        f"Velocity:        {_fmt(threat.velocity_kph, 'km/h')}\n"
        f"Miss distance:   {_fmt(threat.miss_distance_km, 'km')}\n"
        f"{'=' * 50}\n\n"
        f"You can change your alert threshold and frequency in your NeoWatch settings.\n"
    )
    return ThreatSummary(
        subject=subject,
        body=body,
        threat_id=threat.external_id,
        risk_score=threat.risk_score,
    )


class NotificationDispatcher:
    """Formats and sends a single notification per call."""

    def __init__(self, sender: EmailSender):
        self.sender = sender

    async def dispatch(
        self,
        to_address: str,
        display_name: str,
        threat: Threat,
        imminent: bool = False,
    ) -> ThreatSummary:
        """
        Send one alert. DispatchError from the sender propagates to the
        caller, which treats it as non-fatal for other users.
        """
        summary = format_threat_summary(display_name, threat, imminent=imminent)
        await self.sender.send(to_address, display_name, summary)
        logger.info(
            "notification_dispatched",
            to=to_address,
            threat_id=threat.external_id,
            risk_score=threat.risk_score,
            imminent=imminent,
        )
        return summary
