"""Challenge reference data: types, milestones and health risks.

These rows are maintained by the admin surface; the engine only reads them.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from challenge_engine.core.enums import ChallengeMode
from challenge_engine.core.reward_policies import DEFAULT_PRIMARY_CATEGORY
from challenge_engine.db.base import Base


class ChallengeType(Base):
    __tablename__ = "challenge_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    default_mode: Mapped[str] = mapped_column(String(20), nullable=False, default=ChallengeMode.TRACKING.value)
    primary_category: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_PRIMARY_CATEGORY)
    required_observation_types: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    observation_categories: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    show_daily_counter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_streak_counter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_health_risks: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class ChallengeMilestone(Base):
    """Time- or value-based checkpoint of a challenge type."""

    __tablename__ = "challenge_milestones"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    challenge_type_id: Mapped[int] = mapped_column(
        ForeignKey("challenge_types.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    days_required: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    points_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ChallengeHealthRisk(Base):
    """A named health risk that fades between two day counts after quitting."""

    __tablename__ = "challenge_health_risks"
    __table_args__ = (
        CheckConstraint("fade_start_days < fade_end_days", name="ck_health_risk_fade_window"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    challenge_type_id: Mapped[int] = mapped_column(
        ForeignKey("challenge_types.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    fade_start_days: Mapped[int] = mapped_column(Integer, nullable=False)
    fade_end_days: Mapped[int] = mapped_column(Integer, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
