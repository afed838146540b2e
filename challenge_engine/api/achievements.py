"""Achievements API."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from challenge_engine.core.deps import CurrentUserId
from challenge_engine.db.session import get_db
from challenge_engine.models.achievement import Achievement
from challenge_engine.schemas.achievement import AchievementEvaluateResponse, AchievementOut, NewAchievementOut
from challenge_engine.services import achievement_service

router = APIRouter(prefix="/api/achievements", tags=["achievements"])


def _to_out(achievement: Achievement, unlocked_at) -> AchievementOut:
    return AchievementOut(
        id=achievement.id,
        name=achievement.name,
        description=achievement.description,
        icon=achievement.icon,
        points_required=achievement.points_required,
        min_points_threshold=achievement.min_points_threshold,
        unlocked=unlocked_at is not None,
        unlocked_at=unlocked_at,
    )


@router.get("", response_model=list[AchievementOut])
def list_achievements(
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    return [_to_out(a, unlocked_at) for a, unlocked_at in achievement_service.list_achievements(db, user_id)]


@router.get("/me", response_model=list[AchievementOut])
def my_achievements(
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    return [_to_out(a, unlocked_at) for a, unlocked_at in achievement_service.list_user_achievements(db, user_id)]


@router.post("/evaluate", response_model=AchievementEvaluateResponse)
def evaluate_achievements(
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    unlocked = achievement_service.evaluate_for_user(db, user_id)
    return AchievementEvaluateResponse(new_achievements=[NewAchievementOut(**asdict(a)) for a in unlocked])
