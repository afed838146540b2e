"""Milestone unlock model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from challenge_engine.db.base import Base


class MilestoneUnlock(Base):
    __tablename__ = "milestone_unlocks"
    __table_args__ = (
        UniqueConstraint("user_challenge_id", "milestone_id", name="uq_milestone_unlock_challenge_milestone"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_challenge_id: Mapped[int] = mapped_column(
        ForeignKey("user_challenges.id", ondelete="CASCADE"), nullable=False
    )
    milestone_id: Mapped[int] = mapped_column(
        ForeignKey("challenge_milestones.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    unlocked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
