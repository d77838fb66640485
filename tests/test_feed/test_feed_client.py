"""
Tests for the NEO Feed Client.

Covers:
- NeoWs envelope parsing and field mapping
- Query window parameters
- Malformed objects skipped
- HTTP error, transport error, non-JSON and bad envelope → FetchError
"""

from datetime import date, timezone
from zoneinfo import ZoneInfo

import httpx
import pytest

from neowatch.errors import FetchError
from neowatch.feed.client import NeoFeedClient
from neowatch.feed.schemas import parse_neo

FEED_URL = "https://feed.test/neo/rest/v1/feed"


def _neo(neo_id: str, day: str, epoch_ms=None, hazardous=False) -> dict:
    approach = {
        "close_approach_date": day,
        "relative_velocity": {"kilometers_per_hour": "65260.5"},
        "miss_distance": {"kilometers": "4529029.2"},
        "orbiting_body": "Earth",
    }
    if epoch_ms is not None:
        approach["epoch_date_close_approach"] = epoch_ms
    return {
        "id": neo_id,
        "name": f"({neo_id})",
        "is_potentially_hazardous_asteroid": hazardous,
        "estimated_diameter": {
            "meters": {"estimated_diameter_min": 100.0, "estimated_diameter_max": 300.0}
        },
        "close_approach_data": [approach],
    }


def _client(handler, **kwargs) -> NeoFeedClient:
    return NeoFeedClient(FEED_URL, api_key="TEST", transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_fetch_all_parses_envelope():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={
            "element_count": 3,
            "near_earth_objects": {
                "2026-10-21": [_neo("3", "2026-10-21")],
                "2026-10-20": [_neo("1", "2026-10-20", hazardous=True), _neo("2", "2026-10-20")],
            },
        })

    records = await _client(handler, window_days=7).fetch_all(start=date(2026, 10, 20))

    assert seen["params"] == {"start_date": "2026-10-20", "end_date": "2026-10-26", "api_key": "TEST"}
    assert [r.external_id for r in records] == ["1", "2", "3"]
    first = records[0]
    assert first.is_hazardous is True
    assert first.diameter_m == 200.0
    assert first.velocity_kph == 65260.5
    assert first.miss_distance_km == 4529029.2
    assert first.approach_date == date(2026, 10, 20)


@pytest.mark.asyncio
async def test_malformed_objects_skipped():
    def handler(request):
        broken = {"id": "bad", "close_approach_data": []}
        return httpx.Response(200, json={"near_earth_objects": {"2026-10-20": [broken, _neo("ok", "2026-10-20")]}})

    records = await _client(handler).fetch_all(start=date(2026, 10, 20))
    assert [r.external_id for r in records] == ["ok"]


@pytest.mark.asyncio
async def test_http_error_raises_fetch_error():
    client = _client(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(FetchError, match="503"):
        await client.fetch_all(start=date(2026, 10, 20))


@pytest.mark.asyncio
async def test_transport_error_raises_fetch_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError, match="unreachable"):
        await _client(handler).fetch_all(start=date(2026, 10, 20))


@pytest.mark.asyncio
async def test_non_json_body_raises_fetch_error():
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(FetchError):
        await client.fetch_all(start=date(2026, 10, 20))


@pytest.mark.asyncio
async def test_missing_envelope_raises_fetch_error():
    client = _client(lambda request: httpx.Response(200, json={"links": {}}))
    with pytest.raises(FetchError, match="near_earth_objects"):
        await client.fetch_all(start=date(2026, 10, 20))


class TestApproachDate:
    def test_epoch_converted_to_reference_timezone(self):
        # 2026-10-20 23:30 UTC is already 2026-10-21 in Tokyo
        epoch_ms = 1792539000000
        raw = _neo("x", "2026-10-20", epoch_ms=epoch_ms)
        assert parse_neo(raw, timezone.utc).approach_date == date(2026, 10, 20)
        assert parse_neo(raw, ZoneInfo("Asia/Tokyo")).approach_date == date(2026, 10, 21)

    def test_falls_back_to_calendar_date(self):
        assert parse_neo(_neo("x", "2026-10-22")).approach_date == date(2026, 10, 22)
