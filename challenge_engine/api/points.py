"""Points API."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from challenge_engine.core.deps import CurrentUserId
from challenge_engine.db.session import get_db
from challenge_engine.schemas.achievement import AchievementOut, NewAchievementOut
from challenge_engine.schemas.points import (
    ActivityAwardRequest,
    ActivityAwardResponse,
    PointEntryOut,
    PointsSummaryOut,
    UploadAwardRequest,
    UploadAwardResponse,
)
from challenge_engine.services import achievement_service, ledger_service, rewards_service

router = APIRouter(prefix="/api/points", tags=["points"])


@router.post("/activity", response_model=ActivityAwardResponse)
def award_activity_points(
    data: ActivityAwardRequest,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    result = rewards_service.award_activity_points(
        db,
        user_id,
        data.activity_type,
        description=data.description,
        correlation_key=data.correlation_key,
    )
    return ActivityAwardResponse(
        success=result.credit.granted,
        already_rewarded=result.credit.already_rewarded,
        points_awarded=result.credit.points,
        total_points=result.credit.total_points,
        new_achievements=[NewAchievementOut(**asdict(a)) for a in result.new_achievements],
    )


@router.post("/upload", response_model=UploadAwardResponse)
def award_upload_points(
    data: UploadAwardRequest,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    result = rewards_service.award_upload_points(db, user_id, data.upload_type, data.points)
    return UploadAwardResponse(
        success=result.credit.granted,
        already_rewarded=result.credit.already_rewarded,
        points_awarded=result.credit.points,
        total_points=result.credit.total_points,
        new_achievements=[NewAchievementOut(**asdict(a)) for a in result.new_achievements],
    )


@router.get("/me", response_model=PointsSummaryOut)
def my_points(
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    summary = achievement_service.progress(db, user_id)
    upcoming = summary.next_achievement
    return PointsSummaryOut(
        total_points=summary.total_points,
        next_achievement=AchievementOut(
            id=upcoming.id,
            name=upcoming.name,
            description=upcoming.description,
            icon=upcoming.icon,
            points_required=upcoming.points_required,
            min_points_threshold=upcoming.min_points_threshold,
        )
        if upcoming
        else None,
        progress_percent=summary.progress_percent,
    )


@router.get("/history", response_model=list[PointEntryOut])
def point_history(
    user_id: CurrentUserId,
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return ledger_service.list_history(db, user_id, limit=limit)
