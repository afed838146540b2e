"""Achievement schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class NewAchievementOut(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    points_required: int


class AchievementOut(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    points_required: int
    min_points_threshold: int | None
    unlocked: bool = False
    unlocked_at: datetime | None = None


class AchievementEvaluateResponse(BaseModel):
    success: bool = True
    new_achievements: list[NewAchievementOut]
