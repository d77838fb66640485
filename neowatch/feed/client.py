"""
NEO Feed Client — HTTP client for the upstream NASA NeoWs feed.

Unlike a best-effort signal source, the refresh job must be able to tell
"no data" from "feed down", so every transport or envelope problem raises
FetchError. Individual malformed objects are skipped.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional

import httpx
import structlog

from neowatch.errors import FetchError
from neowatch.feed.schemas import RawHazardRecord, parse_neo

logger = structlog.get_logger(__name__)


class NeoFeedClient:
    """Pull-based source of upstream hazard data."""

    def __init__(
        self,
        feed_url: str,
        api_key: str = "DEMO_KEY",
        timeout: float = 30.0,
        window_days: int = 7,
        tz: tzinfo = timezone.utc,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.feed_url = feed_url
        self.api_key = api_key
        self.timeout = timeout
        self.window_days = window_days
        self.tz = tz
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def fetch_all(self, start: Optional[date] = None) -> list[RawHazardRecord]:
        """
        Fetch every close approach in the feed window starting at ``start``
        (default: today in the reference timezone).
        """
        start = start or datetime.now(self.tz).date()
        end = start + timedelta(days=self.window_days - 1)
        params = {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "api_key": self.api_key,
        }

        try:
            async with self._client() as client:
                resp = await client.get(self.feed_url, params=params)
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as e:
            raise FetchError(f"Feed returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Feed unreachable: {e}") from e
        except ValueError as e:
            raise FetchError("Feed returned a non-JSON body") from e

        by_date = body.get("near_earth_objects") if isinstance(body, dict) else None
        if not isinstance(by_date, dict):
            raise FetchError("Feed response has no near_earth_objects")

        records: list[RawHazardRecord] = []
        for day in sorted(by_date):
            for raw in by_date[day] or []:
                try:
                    records.append(parse_neo(raw, self.tz))
                except (KeyError, TypeError, ValueError) as parse_err:
                    logger.debug(
                        "neo_parse_skip",
                        neo_id=raw.get("id", "?") if isinstance(raw, dict) else "?",
                        error=str(parse_err),
                    )

        logger.info(
            "hazard_feed_fetched",
            total=len(records),
            start_date=params["start_date"],
            end_date=params["end_date"],
        )
        return records
