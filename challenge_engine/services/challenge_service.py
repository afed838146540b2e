"""Challenge lifecycle: joining, status changes and mode/streak transitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from challenge_engine.core.enums import OPEN_STATUSES, ChallengeMode, ChallengeStatus
from challenge_engine.core.errors import InvalidState, NotFound, ValidationFailed
from challenge_engine.db.locks import lock_user
from challenge_engine.models.challenge_type import ChallengeHealthRisk, ChallengeMilestone, ChallengeType
from challenge_engine.models.milestone_unlock import MilestoneUnlock
from challenge_engine.models.user_challenge import UserChallenge
from challenge_engine.services.streaks import (
    StreakUpdate,
    apply_primary_observation,
    days_since_quit,
    health_risk_fade,
    today_local,
)

logger = logging.getLogger(__name__)

# target status -> statuses it may be reached from
STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    ChallengeStatus.PAUSED.value: (ChallengeStatus.ACTIVE.value,),
    ChallengeStatus.ACTIVE.value: (ChallengeStatus.PAUSED.value,),
    ChallengeStatus.CANCELLED.value: OPEN_STATUSES,
    ChallengeStatus.COMPLETED.value: OPEN_STATUSES,
}


@dataclass(frozen=True)
class MilestoneView:
    milestone: ChallengeMilestone
    unlocked: bool


@dataclass(frozen=True)
class HealthRiskView:
    risk: ChallengeHealthRisk
    fade_percent: int


@dataclass(frozen=True)
class ChallengeDetail:
    challenge: UserChallenge
    challenge_type: ChallengeType
    days_since_quit: int
    milestones: list[MilestoneView]
    health_risks: list[HealthRiskView]


def get_active_challenge_type(db: Session, challenge_type_id: int) -> ChallengeType:
    challenge_type = db.get(ChallengeType, challenge_type_id)
    if not challenge_type or not challenge_type.is_active:
        raise NotFound("Challenge type not found")
    return challenge_type


def get_owned_challenge(
    db: Session,
    user_id: str,
    user_challenge_id: int,
    *,
    for_update: bool = False,
) -> UserChallenge:
    """Load a challenge owned by ``user_id``; other users' rows look missing."""
    stmt = select(UserChallenge).where(
        UserChallenge.id == user_challenge_id,
        UserChallenge.user_id == user_id,
    )
    if for_update:
        stmt = stmt.with_for_update()
    challenge = db.execute(stmt).scalar_one_or_none()
    if not challenge:
        raise NotFound("Challenge not found")
    return challenge


def _find_open_challenge(db: Session, user_id: str, challenge_type_id: int) -> UserChallenge | None:
    return db.execute(
        select(UserChallenge)
        .where(
            UserChallenge.user_id == user_id,
            UserChallenge.challenge_type_id == challenge_type_id,
            UserChallenge.status.in_(OPEN_STATUSES),
        )
        .with_for_update()
    ).scalar_one_or_none()


def _resolve_mode(challenge_type: ChallengeType, mode: ChallengeMode | str | None) -> str:
    if mode is None:
        return challenge_type.default_mode
    try:
        return ChallengeMode(mode).value
    except ValueError as exc:
        raise ValidationFailed(f"Unknown challenge mode: {mode}") from exc


def _start_challenge(
    db: Session,
    user_id: str,
    challenge_type: ChallengeType,
    mode: ChallengeMode | str | None,
    today: date,
) -> UserChallenge:
    """Insert a fresh active row. Flushes; the open-row unique index rejects duplicates."""
    current_mode = _resolve_mode(challenge_type, mode)
    quitting = current_mode == ChallengeMode.QUITTING.value
    challenge = UserChallenge(
        user_id=user_id,
        challenge_type_id=challenge_type.id,
        status=ChallengeStatus.ACTIVE.value,
        current_mode=current_mode,
        quit_date=today if quitting else None,
        current_streak_days=1 if quitting else 0,
        longest_streak_days=1 if quitting else 0,
    )
    try:
        with db.begin_nested():
            db.add(challenge)
            db.flush()
    except IntegrityError as exc:
        raise InvalidState("Challenge already joined") from exc
    return challenge


def join_challenge(
    db: Session,
    user_id: str,
    challenge_type_id: int,
    mode: ChallengeMode | str | None = None,
    *,
    today: date | None = None,
) -> UserChallenge:
    lock_user(db, user_id)
    challenge_type = get_active_challenge_type(db, challenge_type_id)
    if _find_open_challenge(db, user_id, challenge_type_id):
        raise InvalidState("Challenge already joined")

    challenge = _start_challenge(db, user_id, challenge_type, mode, today or today_local())
    db.commit()
    logger.info(
        "challenge_joined user_id=%s user_challenge_id=%s mode=%s",
        user_id,
        challenge.id,
        challenge.current_mode,
    )
    return challenge


def change_status(db: Session, user_id: str, user_challenge_id: int, target: ChallengeStatus) -> UserChallenge:
    """Apply one administrative status change; the mode is left alone."""
    lock_user(db, user_id)
    challenge = get_owned_challenge(db, user_id, user_challenge_id, for_update=True)
    allowed_from = STATUS_TRANSITIONS[target.value]
    if challenge.status not in allowed_from:
        raise InvalidState(f"Cannot change challenge from {challenge.status} to {target.value}")

    challenge.status = target.value
    if target is ChallengeStatus.COMPLETED:
        challenge.completed_at = datetime.now(timezone.utc)
    db.commit()
    logger.info(
        "challenge_status_changed user_id=%s user_challenge_id=%s status=%s",
        user_id,
        challenge.id,
        challenge.status,
    )
    return challenge


def pause_challenge(db: Session, user_id: str, user_challenge_id: int) -> UserChallenge:
    return change_status(db, user_id, user_challenge_id, ChallengeStatus.PAUSED)


def resume_challenge(db: Session, user_id: str, user_challenge_id: int) -> UserChallenge:
    return change_status(db, user_id, user_challenge_id, ChallengeStatus.ACTIVE)


def cancel_challenge(db: Session, user_id: str, user_challenge_id: int) -> UserChallenge:
    return change_status(db, user_id, user_challenge_id, ChallengeStatus.CANCELLED)


def complete_challenge(db: Session, user_id: str, user_challenge_id: int) -> UserChallenge:
    return change_status(db, user_id, user_challenge_id, ChallengeStatus.COMPLETED)


def restart_challenge(
    db: Session,
    user_id: str,
    challenge_type_id: int,
    mode: ChallengeMode | str | None = None,
    *,
    today: date | None = None,
) -> UserChallenge:
    """Cancel the open row of this type (if any) and start a new one.

    Milestone unlocks belong to the old row, so the new run starts with none.
    """
    lock_user(db, user_id)
    challenge_type = get_active_challenge_type(db, challenge_type_id)
    previous = _find_open_challenge(db, user_id, challenge_type_id)
    if previous:
        previous.status = ChallengeStatus.CANCELLED.value
        db.flush()

    challenge = _start_challenge(db, user_id, challenge_type, mode, today or today_local())
    db.commit()
    logger.info(
        "challenge_restarted user_id=%s previous_id=%s user_challenge_id=%s",
        user_id,
        previous.id if previous else None,
        challenge.id,
    )
    return challenge


def apply_observation(
    challenge: UserChallenge,
    numeric_value: float,
    observation_date: date,
) -> StreakUpdate:
    """Run the transition rule for one primary-category log and store the outcome on the row."""
    update = apply_primary_observation(challenge, numeric_value, observation_date)
    challenge.current_mode = update.current_mode
    challenge.quit_date = update.quit_date
    challenge.current_streak_days = update.current_streak_days
    challenge.longest_streak_days = update.longest_streak_days
    challenge.last_zero_logged_at = update.last_zero_logged_at
    if update.transition_occurred:
        logger.info(
            "challenge_transition user_id=%s user_challenge_id=%s new_mode=%s",
            challenge.user_id,
            challenge.id,
            update.current_mode,
        )
    return update


def list_active_for_category(db: Session, user_id: str, category: str) -> list[UserChallenge]:
    """Active challenges whose type is driven by ``category``, locked for update."""
    stmt = (
        select(UserChallenge)
        .join(ChallengeType, ChallengeType.id == UserChallenge.challenge_type_id)
        .where(
            UserChallenge.user_id == user_id,
            UserChallenge.status == ChallengeStatus.ACTIVE.value,
            ChallengeType.primary_category == category,
        )
        .order_by(UserChallenge.id.asc())
        .with_for_update(of=UserChallenge)
    )
    return list(db.execute(stmt).scalars().all())


def list_open_challenges(db: Session, user_id: str) -> list[UserChallenge]:
    result = db.execute(
        select(UserChallenge)
        .where(UserChallenge.user_id == user_id, UserChallenge.status.in_(OPEN_STATUSES))
        .order_by(UserChallenge.started_at.desc(), UserChallenge.id.desc())
    )
    return list(result.scalars().all())


def list_available_types(db: Session, user_id: str) -> list[ChallengeType]:
    """Active challenge types the user has no open run of."""
    joined = select(UserChallenge.challenge_type_id).where(
        UserChallenge.user_id == user_id,
        UserChallenge.status.in_(OPEN_STATUSES),
    )
    result = db.execute(
        select(ChallengeType)
        .where(ChallengeType.is_active.is_(True), ChallengeType.id.not_in(joined))
        .order_by(ChallengeType.name.asc())
    )
    return list(result.scalars().all())


def get_challenge_detail(
    db: Session,
    user_id: str,
    user_challenge_id: int,
    *,
    today: date | None = None,
) -> ChallengeDetail:
    challenge = get_owned_challenge(db, user_id, user_challenge_id)
    challenge_type = db.get(ChallengeType, challenge.challenge_type_id)
    days = days_since_quit(challenge.current_mode, challenge.quit_date, today or today_local())

    unlocked = set(
        db.execute(
            select(MilestoneUnlock.milestone_id).where(MilestoneUnlock.user_challenge_id == challenge.id)
        ).scalars().all()
    )
    milestones = db.execute(
        select(ChallengeMilestone)
        .where(
            ChallengeMilestone.challenge_type_id == challenge.challenge_type_id,
            ChallengeMilestone.is_active.is_(True),
        )
        .order_by(ChallengeMilestone.display_order.asc(), ChallengeMilestone.id.asc())
    ).scalars().all()
    risks = db.execute(
        select(ChallengeHealthRisk)
        .where(
            ChallengeHealthRisk.challenge_type_id == challenge.challenge_type_id,
            ChallengeHealthRisk.is_active.is_(True),
        )
        .order_by(ChallengeHealthRisk.display_order.asc(), ChallengeHealthRisk.id.asc())
    ).scalars().all()

    return ChallengeDetail(
        challenge=challenge,
        challenge_type=challenge_type,
        days_since_quit=days,
        milestones=[MilestoneView(milestone=m, unlocked=m.id in unlocked) for m in milestones],
        health_risks=[
            HealthRiskView(risk=r, fade_percent=health_risk_fade(days, r.fade_start_days, r.fade_end_days))
            for r in risks
        ],
    )
