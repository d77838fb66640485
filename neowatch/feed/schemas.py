"""
Feed Schemas — NeoWatch's internal representation of an upstream NEO.

Mapped from the NASA NeoWs native format:
  id                                          → external_id
  is_potentially_hazardous_asteroid           → is_hazardous
  estimated_diameter.meters (min+max)/2       → diameter_m
  close_approach_data[0].epoch_date_close_approach
      (or close_approach_date)                → approach_date (reference tz)
  close_approach_data[0].relative_velocity.kilometers_per_hour → velocity_kph
  close_approach_data[0].miss_distance.kilometers              → miss_distance_km
"""

from datetime import date, datetime, timezone, tzinfo
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RawHazardRecord(BaseModel):
    """One object from the upstream feed, before risk scoring."""

    model_config = ConfigDict(frozen=True)

    external_id: str
    name: str = ""
    is_hazardous: bool = False
    approach_date: date
    diameter_m: Optional[float] = None
    velocity_kph: Optional[float] = None
    miss_distance_km: Optional[float] = None


def _as_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _approach_date(approach: dict, tz: tzinfo) -> date:
    epoch_ms = approach.get("epoch_date_close_approach")
    if epoch_ms is not None:
        moment = datetime.fromtimestamp(int(epoch_ms) / 1000, tz=timezone.utc)
        return moment.astimezone(tz).date()
    return date.fromisoformat(approach["close_approach_date"])


def parse_neo(raw: dict, tz: tzinfo = timezone.utc) -> RawHazardRecord:
    """Map a raw NeoWs object to a RawHazardRecord. Raises on malformed input."""
    external_id = str(raw["id"])
    approaches = raw.get("close_approach_data") or []
    if not approaches:
        raise ValueError(f"NEO {external_id} has no close approach data")
    approach = approaches[0]

    diameter = None
    meters = (raw.get("estimated_diameter") or {}).get("meters")
    if meters:
        low = _as_float(meters.get("estimated_diameter_min"))
        high = _as_float(meters.get("estimated_diameter_max"))
        if low is not None and high is not None:
            diameter = (low + high) / 2

    return RawHazardRecord(
        external_id=external_id,
        name=raw.get("name", ""),
        is_hazardous=bool(raw.get("is_potentially_hazardous_asteroid", False)),
        approach_date=_approach_date(approach, tz),
        diameter_m=diameter,
        velocity_kph=_as_float((approach.get("relative_velocity") or {}).get("kilometers_per_hour")),
        miss_distance_km=_as_float((approach.get("miss_distance") or {}).get("kilometers")),
    )
