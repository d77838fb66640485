"""
Alerting Schemas.

Preferences and threats are immutable snapshots: the analysis job reads
them once per run and never writes them back.
"""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ──────────────────────────────────────────────────────────────


class EmailFrequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    NEVER = "never"


# ── Inputs ─────────────────────────────────────────────────────────────


class UserPreference(BaseModel):
    """A user's notification preferences joined with their contact details."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    email: str
    username: str
    min_risk_score: int = Field(default=50, ge=0, le=100)
    email_frequency: EmailFrequency = EmailFrequency.DAILY
    notify_imminent: bool = True


class Threat(BaseModel):
    """A hazard object approaching on the run's reference date."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    external_id: str
    name: str = ""
    risk_score: int = Field(ge=0, le=100)
    is_hazardous: bool = False
    approach_date: date
    diameter_m: Optional[float] = None
    velocity_kph: Optional[float] = None
    miss_distance_km: Optional[float] = None


class ThreatSummary(BaseModel):
    """Rendered notification content handed to an email sender."""

    subject: str
    body: str
    threat_id: str
    risk_score: int


# ── Match result ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Skip:
    reason: str


@dataclass(frozen=True)
class NotifyWith:
    threat: Threat
    imminent: bool = False      # True when chosen by the highest-risk fallback


MatchResult = Union[Skip, NotifyWith]
