"""Challenges API."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from challenge_engine.core.deps import CurrentUserId
from challenge_engine.db.session import get_db
from challenge_engine.schemas.achievement import NewAchievementOut
from challenge_engine.schemas.challenge import (
    ChallengeDetailOut,
    ChallengeTypeOut,
    CheckMilestonesRequest,
    CheckMilestonesResponse,
    HealthRiskOut,
    JoinChallengeRequest,
    JoinChallengeResponse,
    MilestoneOut,
    RestartChallengeRequest,
    StatusChangeResponse,
    UnlockedMilestoneOut,
    UserChallengeOut,
)
from challenge_engine.services import challenge_service, milestone_service

router = APIRouter(prefix="/api/challenges", tags=["challenges"])


@router.get("/types", response_model=list[ChallengeTypeOut])
def available_types(
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    return challenge_service.list_available_types(db, user_id)


@router.get("/me", response_model=list[UserChallengeOut])
def my_challenges(
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    return challenge_service.list_open_challenges(db, user_id)


@router.post("/join", response_model=JoinChallengeResponse)
def join_challenge(
    data: JoinChallengeRequest,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    challenge = challenge_service.join_challenge(db, user_id, data.challenge_type_id, data.mode)
    return JoinChallengeResponse(
        user_challenge_id=challenge.id,
        challenge=UserChallengeOut.model_validate(challenge),
    )


@router.post("/restart", response_model=JoinChallengeResponse)
def restart_challenge(
    data: RestartChallengeRequest,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    challenge = challenge_service.restart_challenge(db, user_id, data.challenge_type_id, data.mode)
    return JoinChallengeResponse(
        user_challenge_id=challenge.id,
        challenge=UserChallengeOut.model_validate(challenge),
    )


@router.get("/{user_challenge_id}", response_model=ChallengeDetailOut)
def challenge_detail(
    user_challenge_id: int,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    detail = challenge_service.get_challenge_detail(db, user_id, user_challenge_id)
    return ChallengeDetailOut(
        challenge=UserChallengeOut.model_validate(detail.challenge),
        challenge_type=ChallengeTypeOut.model_validate(detail.challenge_type),
        days_since_quit=detail.days_since_quit,
        milestones=[
            MilestoneOut(
                id=view.milestone.id,
                name=view.milestone.name,
                description=view.milestone.description,
                days_required=view.milestone.days_required,
                target_value=view.milestone.target_value,
                points_awarded=view.milestone.points_awarded,
                display_order=view.milestone.display_order,
                unlocked=view.unlocked,
            )
            for view in detail.milestones
        ],
        health_risks=[
            HealthRiskOut(
                id=view.risk.id,
                name=view.risk.name,
                fade_start_days=view.risk.fade_start_days,
                fade_end_days=view.risk.fade_end_days,
                display_order=view.risk.display_order,
                fade_percent=view.fade_percent,
            )
            for view in detail.health_risks
        ],
    )


@router.post("/{user_challenge_id}/pause", response_model=StatusChangeResponse)
def pause_challenge(
    user_challenge_id: int,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    challenge = challenge_service.pause_challenge(db, user_id, user_challenge_id)
    return StatusChangeResponse(challenge=UserChallengeOut.model_validate(challenge))


@router.post("/{user_challenge_id}/resume", response_model=StatusChangeResponse)
def resume_challenge(
    user_challenge_id: int,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    challenge = challenge_service.resume_challenge(db, user_id, user_challenge_id)
    return StatusChangeResponse(challenge=UserChallengeOut.model_validate(challenge))


@router.post("/{user_challenge_id}/cancel", response_model=StatusChangeResponse)
def cancel_challenge(
    user_challenge_id: int,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    challenge = challenge_service.cancel_challenge(db, user_id, user_challenge_id)
    return StatusChangeResponse(challenge=UserChallengeOut.model_validate(challenge))


@router.post("/{user_challenge_id}/complete", response_model=StatusChangeResponse)
def complete_challenge(
    user_challenge_id: int,
    user_id: CurrentUserId,
    db: Session = Depends(get_db),
):
    challenge = challenge_service.complete_challenge(db, user_id, user_challenge_id)
    return StatusChangeResponse(challenge=UserChallengeOut.model_validate(challenge))


@router.post("/{user_challenge_id}/milestones/check", response_model=CheckMilestonesResponse)
def check_milestones(
    user_challenge_id: int,
    user_id: CurrentUserId,
    data: CheckMilestonesRequest | None = None,
    db: Session = Depends(get_db),
):
    result = milestone_service.check_milestones(
        db,
        user_id,
        user_challenge_id,
        current_value=data.current_value if data else None,
    )
    return CheckMilestonesResponse(
        unlocked_milestones=[UnlockedMilestoneOut(**asdict(m)) for m in result.unlocked_milestones],
        days_in_challenge=result.days_in_challenge,
        new_achievements=[NewAchievementOut(**asdict(a)) for a in result.new_achievements],
    )
