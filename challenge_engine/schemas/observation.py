"""Observation schemas."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from challenge_engine.schemas.achievement import NewAchievementOut
from challenge_engine.schemas.challenge import UnlockedMilestoneOut


class ObservationCreate(BaseModel):
    category: str = Field(min_length=1, max_length=50)
    value: str = Field(default="", max_length=255)
    numeric_value: float | None = Field(default=None, allow_inf_nan=False)
    note: str | None = Field(default=None, max_length=2000)
    date: dt.date | None = None


class ObservationOut(BaseModel):
    id: int
    category: str
    value: str
    numeric_value: float | None
    note: str | None
    observation_date: dt.date
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class LogObservationResponse(BaseModel):
    success: bool = True
    observation_id: int
    transition_occurred: bool = False
    new_mode: str | None = None
    current_streak_days: int | None = None
    unlocked_milestones: list[UnlockedMilestoneOut] = Field(default_factory=list)
    points_awarded: int = 0
    new_achievements: list[NewAchievementOut] = Field(default_factory=list)
