"""SQLAlchemy models."""

from __future__ import annotations

from challenge_engine.models.achievement import Achievement, BadgeCondition, UserAchievement
from challenge_engine.models.challenge_type import ChallengeHealthRisk, ChallengeMilestone, ChallengeType
from challenge_engine.models.milestone_unlock import MilestoneUnlock
from challenge_engine.models.observation import Observation
from challenge_engine.models.points import PointEntry, RewardRule, UserActivityCount
from challenge_engine.models.user_challenge import UserChallenge

__all__ = [
    "Achievement",
    "BadgeCondition",
    "ChallengeHealthRisk",
    "ChallengeMilestone",
    "ChallengeType",
    "MilestoneUnlock",
    "Observation",
    "PointEntry",
    "RewardRule",
    "UserAchievement",
    "UserActivityCount",
    "UserChallenge",
]
