"""Point ledger, reward rules and activity counters."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from challenge_engine.core.enums import RewardFrequency
from challenge_engine.db.base import Base


class PointEntry(Base):
    """Append-only point grant. A user's total is the sum of their entries."""

    __tablename__ = "point_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="uq_point_entries_user_key"),
        CheckConstraint("points > 0", name="ck_point_entries_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    activity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    correlation_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # NULL keys never collide, so ungated per-event grants always insert
    idempotency_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class RewardRule(Base):
    """Points and frequency per activity type (reference data)."""

    __tablename__ = "reward_rules"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    frequency: Mapped[str] = mapped_column(String(20), nullable=False, default=RewardFrequency.PER_EVENT.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UserActivityCount(Base):
    """Running count of rewarded activities per type, read by badge conditions."""

    __tablename__ = "user_activity_counts"
    __table_args__ = (
        UniqueConstraint("user_id", "activity_type", name="uq_user_activity_counts_user_activity"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    total_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_activity_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
