"""
Tests for the Notification Dispatcher.

Covers:
- Message formatting (subject, body fields, imminent wording)
- Exactly one send per dispatch
- DispatchError propagates to the caller
"""

import pytest

from neowatch.alerting.dispatcher import NotificationDispatcher, format_threat_summary
from neowatch.errors import DispatchError


def test_summary_contains_threat_details(make_threat):
    threat = make_threat(
        82,
        name="(2024 XY1)",
        is_hazardous=True,
        diameter_m=420.0,
        velocity_kph=71_250.5,
        miss_distance_km=1_234_567.0,
    )
    summary = format_threat_summary("Ada", threat)

    assert "(2024 XY1)" in summary.subject
    assert "CRITICAL" in summary.subject
    assert "82/100" in summary.subject
    assert summary.body.startswith("Hello Ada,")
    assert "420 m" in summary.body
    assert "1,234,567 km" in summary.body
    assert threat.approach_date.isoformat() in summary.body
    assert summary.threat_id == threat.external_id
    assert summary.risk_score == 82


def test_summary_handles_missing_measurements(make_threat):
    summary = format_threat_summary("", make_threat(20))
    assert summary.body.startswith("Hello,")
    assert "LOW" in summary.subject
    assert "unknown" in summary.body


def test_imminent_wording(make_threat):
    summary = format_threat_summary("Ada", make_threat(40), imminent=True)
    assert "highest-risk" in summary.body


@pytest.mark.asyncio
async def test_dispatch_sends_once(make_threat, recording_sender):
    dispatcher = NotificationDispatcher(recording_sender)
    threat = make_threat(66)
    await dispatcher.dispatch("ada@test.com", "Ada", threat)

    assert len(recording_sender.sent) == 1
    to, name, summary = recording_sender.sent[0]
    assert to == "ada@test.com"
    assert name == "Ada"
    assert summary.threat_id == threat.external_id


@pytest.mark.asyncio
async def test_dispatch_error_propagates(make_threat, sender_factory):
    dispatcher = NotificationDispatcher(sender_factory(fail_for=("bad@test.com",)))
    with pytest.raises(DispatchError):
        await dispatcher.dispatch("bad@test.com", "Bad", make_threat(66))
