"""Milestone evaluation.

A milestone unlocks at most once per challenge run. The unlock row and its
point credit are written together; a lost race on the unique
(user_challenge_id, milestone_id) constraint skips the milestone silently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from challenge_engine.core.enums import ChallengeStatus
from challenge_engine.core.errors import InvalidState
from challenge_engine.db.locks import lock_user
from challenge_engine.models.challenge_type import ChallengeMilestone
from challenge_engine.models.milestone_unlock import MilestoneUnlock
from challenge_engine.models.user_challenge import UserChallenge
from challenge_engine.services import achievement_service
from challenge_engine.services.achievement_service import UnlockedAchievement
from challenge_engine.services.challenge_service import get_owned_challenge
from challenge_engine.services.ledger_service import credit, milestone_key
from challenge_engine.services.streaks import days_since_quit, today_local

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnlockedMilestone:
    id: int
    name: str
    description: str | None
    points: int


@dataclass
class MilestoneCheckResult:
    days_in_challenge: int
    unlocked_milestones: list[UnlockedMilestone] = field(default_factory=list)
    new_achievements: list[UnlockedAchievement] = field(default_factory=list)


def is_reached(milestone: ChallengeMilestone, days: int, current_value: float | None) -> bool:
    """Every configured criterion must hold; a milestone with none never unlocks."""
    if milestone.days_required is None and milestone.target_value is None:
        return False
    if milestone.days_required is not None and days < milestone.days_required:
        return False
    if milestone.target_value is not None:
        if current_value is None or current_value < milestone.target_value:
            return False
    return True


def evaluate(
    db: Session,
    challenge: UserChallenge,
    *,
    today: date,
    current_value: float | None = None,
) -> MilestoneCheckResult:
    """Unlock newly reached milestones of one challenge and credit their points. Flushes only."""
    days = days_since_quit(challenge.current_mode, challenge.quit_date, today)
    milestones = db.execute(
        select(ChallengeMilestone)
        .where(
            ChallengeMilestone.challenge_type_id == challenge.challenge_type_id,
            ChallengeMilestone.is_active.is_(True),
        )
        .order_by(ChallengeMilestone.display_order.asc(), ChallengeMilestone.id.asc())
    ).scalars().all()
    already = set(
        db.execute(
            select(MilestoneUnlock.milestone_id).where(MilestoneUnlock.user_challenge_id == challenge.id)
        ).scalars().all()
    )

    result = MilestoneCheckResult(days_in_challenge=days)
    for milestone in milestones:
        if milestone.id in already or not is_reached(milestone, days, current_value):
            continue
        try:
            with db.begin_nested():
                db.add(
                    MilestoneUnlock(
                        user_challenge_id=challenge.id,
                        milestone_id=milestone.id,
                        user_id=challenge.user_id,
                    )
                )
                db.flush()
        except IntegrityError:
            logger.debug(
                "milestone_unlock_race_lost user_challenge_id=%s milestone_id=%s",
                challenge.id,
                milestone.id,
            )
            continue

        if milestone.points_awarded > 0:
            credit(
                db,
                challenge.user_id,
                milestone.points_awarded,
                f"Milestone: {milestone.name}",
                idempotency_key=milestone_key(challenge.id, milestone.id),
                correlation_key=str(milestone.id),
            )
        logger.info(
            "milestone_unlocked user_id=%s user_challenge_id=%s milestone_id=%s",
            challenge.user_id,
            challenge.id,
            milestone.id,
        )
        result.unlocked_milestones.append(
            UnlockedMilestone(
                id=milestone.id,
                name=milestone.name,
                description=milestone.description,
                points=milestone.points_awarded,
            )
        )
    return result


def check_milestones(
    db: Session,
    user_id: str,
    user_challenge_id: int,
    *,
    current_value: float | None = None,
    today: date | None = None,
) -> MilestoneCheckResult:
    lock_user(db, user_id)
    challenge = get_owned_challenge(db, user_id, user_challenge_id, for_update=True)
    if challenge.status != ChallengeStatus.ACTIVE.value:
        raise InvalidState(f"Cannot check milestones of a {challenge.status} challenge")

    result = evaluate(db, challenge, today=today or today_local(), current_value=current_value)
    if result.unlocked_milestones:
        result.new_achievements = achievement_service.evaluate(db, user_id)
    db.commit()
    return result
