"""
NeoWatch SQLAlchemy Models.

- hazard_objects: refreshed in place by the data refresh job (upsert-only)
- users / alert_preferences: owned by the account service, read-only here
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neowatch.db.engine import Base


class HazardObject(Base):
    """A near-Earth object as last seen in the upstream feed."""

    __tablename__ = "hazard_objects"
    __table_args__ = (
        Index("ix_hazard_objects_approach_date", "approach_date"),
        CheckConstraint("risk_score >= 0 AND risk_score <= 100", name="ck_hazard_risk_score_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_hazardous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approach_date: Mapped[date] = mapped_column(Date, nullable=False)
    diameter_m: Mapped[Optional[float]] = mapped_column(Float)
    velocity_kph: Mapped[Optional[float]] = mapped_column(Float)
    miss_distance_km: Mapped[Optional[float]] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<HazardObject {self.external_id} risk={self.risk_score} {self.approach_date}>"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    alert_preference: Mapped[Optional["AlertPreference"]] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class AlertPreference(Base):
    """Per-user notification preferences (defaults mirror the preferences API)."""

    __tablename__ = "alert_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    min_risk_score: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    email_frequency: Mapped[str] = mapped_column(String(10), nullable=False, default="daily")
    notify_imminent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped["User"] = relationship(back_populates="alert_preference")
