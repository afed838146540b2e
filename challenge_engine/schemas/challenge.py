"""Challenge schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from challenge_engine.core.enums import ChallengeMode
from challenge_engine.schemas.achievement import NewAchievementOut


class ChallengeTypeOut(BaseModel):
    id: int
    name: str
    description: str | None
    default_mode: str
    primary_category: str
    required_observation_types: list[str]
    show_daily_counter: bool
    show_streak_counter: bool
    show_health_risks: bool

    model_config = {"from_attributes": True}


class UserChallengeOut(BaseModel):
    id: int
    challenge_type_id: int
    status: str
    current_mode: str
    started_at: datetime
    completed_at: datetime | None
    quit_date: date | None
    current_streak_days: int
    longest_streak_days: int
    last_zero_logged_at: date | None

    model_config = {"from_attributes": True}


class JoinChallengeRequest(BaseModel):
    challenge_type_id: int
    mode: ChallengeMode | None = None


class RestartChallengeRequest(BaseModel):
    challenge_type_id: int
    mode: ChallengeMode | None = None


class JoinChallengeResponse(BaseModel):
    user_challenge_id: int
    challenge: UserChallengeOut


class StatusChangeResponse(BaseModel):
    success: bool = True
    challenge: UserChallengeOut


class MilestoneOut(BaseModel):
    id: int
    name: str
    description: str | None
    days_required: int | None
    target_value: float | None
    points_awarded: int
    display_order: int
    unlocked: bool = False


class HealthRiskOut(BaseModel):
    id: int
    name: str
    fade_start_days: int
    fade_end_days: int
    display_order: int
    fade_percent: int = Field(ge=0, le=100)


class ChallengeDetailOut(BaseModel):
    challenge: UserChallengeOut
    challenge_type: ChallengeTypeOut
    days_since_quit: int
    milestones: list[MilestoneOut]
    health_risks: list[HealthRiskOut]


class CheckMilestonesRequest(BaseModel):
    current_value: float | None = Field(default=None, allow_inf_nan=False)


class UnlockedMilestoneOut(BaseModel):
    id: int
    name: str
    description: str | None
    points: int


class CheckMilestonesResponse(BaseModel):
    success: bool = True
    unlocked_milestones: list[UnlockedMilestoneOut]
    days_in_challenge: int
    new_achievements: list[NewAchievementOut] = Field(default_factory=list)
