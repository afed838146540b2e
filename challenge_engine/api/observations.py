"""Observations API."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from challenge_engine.core.config import settings
from challenge_engine.core.deps import CurrentUserId
from challenge_engine.core.errors import EngineError
from challenge_engine.db.session import get_db
from challenge_engine.schemas.achievement import NewAchievementOut
from challenge_engine.schemas.challenge import UnlockedMilestoneOut
from challenge_engine.schemas.observation import LogObservationResponse, ObservationCreate, ObservationOut
from challenge_engine.services import observation_service

router = APIRouter(prefix="/api/observations", tags=["observations"])
logger = logging.getLogger(__name__)


@router.post("", response_model=LogObservationResponse)
def log_observation(
    data: ObservationCreate,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    try:
        result = observation_service.log_observation(
            db,
            user_id,
            data.category,
            data.value,
            numeric_value=data.numeric_value,
            note=data.note,
            observation_date=data.date,
        )
    except EngineError:
        raise
    except Exception:
        logger.exception("observation_log_failed user_id=%s category=%s", user_id, data.category)
        raise
    return LogObservationResponse(
        observation_id=result.observation.id,
        transition_occurred=result.transition_occurred,
        new_mode=result.new_mode,
        current_streak_days=result.current_streak_days,
        unlocked_milestones=[UnlockedMilestoneOut(**asdict(m)) for m in result.unlocked_milestones],
        points_awarded=result.points_awarded,
        new_achievements=[NewAchievementOut(**asdict(a)) for a in result.new_achievements],
    )


@router.get("/me", response_model=list[ObservationOut])
def my_observations(
    user_id: CurrentUserId,
    category: str | None = None,
    limit: int = Query(default=50, ge=1, le=settings.observation_history_limit),
    db: Session = Depends(get_db),
):
    return observation_service.list_history(db, user_id, category=category, limit=limit)


@router.get("/latest", response_model=dict[str, ObservationOut])
def latest_observations(
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    return observation_service.latest_by_category(db, user_id)
