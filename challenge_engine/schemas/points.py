"""Points schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from challenge_engine.core.enums import ActivityType
from challenge_engine.schemas.achievement import AchievementOut, NewAchievementOut


class ActivityAwardRequest(BaseModel):
    activity_type: ActivityType
    description: str | None = Field(default=None, max_length=255)
    correlation_key: str | None = Field(default=None, max_length=200)


class ActivityAwardResponse(BaseModel):
    success: bool
    already_rewarded: bool = False
    points_awarded: int = 0
    total_points: int
    new_achievements: list[NewAchievementOut] = Field(default_factory=list)


class UploadAwardRequest(BaseModel):
    upload_type: str = Field(min_length=1, max_length=50)
    points: int | None = Field(default=None, gt=0)


class UploadAwardResponse(BaseModel):
    success: bool
    already_rewarded: bool = False
    points_awarded: int = 0
    total_points: int
    new_achievements: list[NewAchievementOut] = Field(default_factory=list)


class PointEntryOut(BaseModel):
    id: int
    points: int
    reason: str
    activity_type: str | None
    correlation_key: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PointsSummaryOut(BaseModel):
    total_points: int
    next_achievement: AchievementOut | None = None
    progress_percent: float
