"""User challenge model."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from challenge_engine.core.enums import ChallengeStatus
from challenge_engine.db.base import Base

_OPEN_ROW = text("status IN ('active', 'paused')")


class UserChallenge(Base):
    """One user's run of a challenge type. Never deleted; cancel/complete are terminal."""

    __tablename__ = "user_challenges"
    __table_args__ = (
        Index(
            "uq_user_challenges_open_per_type",
            "user_id",
            "challenge_type_id",
            unique=True,
            postgresql_where=_OPEN_ROW,
            sqlite_where=_OPEN_ROW,
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    challenge_type_id: Mapped[int] = mapped_column(
        ForeignKey("challenge_types.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ChallengeStatus.ACTIVE.value)
    current_mode: Mapped[str] = mapped_column(String(20), nullable=False)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    quit_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    current_streak_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_zero_logged_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
