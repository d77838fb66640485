"""
Preference Matcher — decides, per user, whether today's threats warrant an email.

Pure function: no I/O, no clock. The caller supplies the weekday
(``date.weekday()`` convention, Monday == 0).

Rules, in order:
1. Weekly users are only evaluated on Mondays, unless notify_imminent is set.
   With notify_imminent the weekly cadence is bypassed entirely and the user
   is evaluated like a daily user.
2. The first threat (store order) whose risk_score >= min_risk_score wins.
3. Otherwise, with notify_imminent, the single highest-risk threat is sent
   (first encountered wins ties).
4. Otherwise skip.
"""

from typing import Sequence

from neowatch.alerting.schemas import (
    EmailFrequency,
    MatchResult,
    NotifyWith,
    Skip,
    Threat,
    UserPreference,
)

MONDAY = 0


def match_preference(
    threats: Sequence[Threat],
    preference: UserPreference,
    weekday: int,
) -> MatchResult:
    """Return Skip or NotifyWith(threat) for one user. At most one threat."""
    if not threats:
        raise ValueError("match_preference requires a non-empty threat list")

    weekly_gate = (
        preference.email_frequency == EmailFrequency.WEEKLY and weekday != MONDAY
    )
    if weekly_gate and not preference.notify_imminent:
        return Skip(reason="weekly_schedule_not_monday")

    for threat in threats:
        if threat.risk_score >= preference.min_risk_score:
            return NotifyWith(threat=threat)

    if preference.notify_imminent:
        highest = threats[0]
        for threat in threats[1:]:
            if threat.risk_score > highest.risk_score:
                highest = threat
        return NotifyWith(threat=highest, imminent=True)

    return Skip(reason="below_threshold")
