"""
Risk scoring for feed records.

Deterministic: the same record always yields the same score, so replaying
an unchanged feed never changes stored derived fields.

Score (0-100) = size (35) + proximity (35) + speed (15) + hazardous flag (15)
"""

from typing import Optional

from neowatch.feed.schemas import RawHazardRecord

SIZE_WEIGHT = 35.0
PROXIMITY_WEIGHT = 35.0
SPEED_WEIGHT = 15.0
HAZARDOUS_BONUS = 15.0

SIZE_CEILING_M = 1000.0             # 1 km and larger scores full size weight
PROXIMITY_LIMIT_KM = 7_479_893.5    # 0.05 AU, the PHA distance criterion
SPEED_CEILING_KPH = 100_000.0


def _ratio(value: Optional[float], ceiling: float) -> float:
    if value is None or value <= 0:
        return 0.0
    return min(value / ceiling, 1.0)


def compute_risk_score(record: RawHazardRecord) -> int:
    """Normalize a feed record into an integer risk score in [0, 100]."""
    size = _ratio(record.diameter_m, SIZE_CEILING_M) * SIZE_WEIGHT

    proximity = 0.0
    if record.miss_distance_km is not None and record.miss_distance_km >= 0:
        proximity = max(0.0, 1.0 - record.miss_distance_km / PROXIMITY_LIMIT_KM) * PROXIMITY_WEIGHT

    speed = _ratio(record.velocity_kph, SPEED_CEILING_KPH) * SPEED_WEIGHT
    bonus = HAZARDOUS_BONUS if record.is_hazardous else 0.0

    score = round(size + proximity + speed + bonus)
    return max(0, min(100, score))


def hazard_level(risk_score: int, is_hazardous: bool) -> int:
    """0 = low, 1 = elevated, 2 = critical (same bands as the dashboard)."""
    if risk_score > 75 or (is_hazardous and risk_score > 50):
        return 2
    if risk_score > 50 or is_hazardous:
        return 1
    return 0


def to_hazard_fields(record: RawHazardRecord) -> dict:
    """Stored column values for a feed record, derived fields included."""
    return {
        "name": record.name,
        "risk_score": compute_risk_score(record),
        "is_hazardous": record.is_hazardous,
        "approach_date": record.approach_date,
        "diameter_m": record.diameter_m,
        "velocity_kph": record.velocity_kph,
        "miss_distance_km": record.miss_distance_km,
    }
