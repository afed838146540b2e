"""Achievement evaluation and read views.

An achievement unlocks when its point gate and all of its badge conditions
hold. Unlocking is an INSERT guarded by the unique (user_id, achievement_id)
constraint, so concurrent evaluations unlock each achievement once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from challenge_engine.db.locks import lock_user
from challenge_engine.models.achievement import Achievement, BadgeCondition, UserAchievement
from challenge_engine.services.ledger_service import activity_counts, total_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnlockedAchievement:
    id: int
    name: str
    description: str
    icon: str
    points_required: int


@dataclass(frozen=True)
class AchievementProgress:
    total_points: int
    next_achievement: Achievement | None
    progress_percent: float


def point_gate(achievement: Achievement) -> int:
    """Points needed to satisfy the gate; 0 when the achievement is activity-gated only."""
    if achievement.points_required:
        return achievement.points_required
    return achievement.min_points_threshold or 0


def _conditions_by_achievement(db: Session) -> dict[int, list[BadgeCondition]]:
    grouped: dict[int, list[BadgeCondition]] = {}
    for condition in db.execute(select(BadgeCondition)).scalars().all():
        grouped.setdefault(condition.achievement_id, []).append(condition)
    return grouped


def _unlocked_ids(db: Session, user_id: str) -> set[int]:
    result = db.execute(select(UserAchievement.achievement_id).where(UserAchievement.user_id == user_id))
    return set(result.scalars().all())


def is_satisfied(
    achievement: Achievement,
    conditions: list[BadgeCondition],
    points: int,
    counts: dict[str, int],
) -> bool:
    if points < point_gate(achievement):
        return False
    return all(counts.get(c.activity_type, 0) >= c.required_count for c in conditions)


def evaluate(db: Session, user_id: str) -> list[UnlockedAchievement]:
    """Unlock every achievement the user now qualifies for. Flushes, does not commit."""
    unlocked = _unlocked_ids(db, user_id)
    candidates = db.execute(
        select(Achievement).order_by(Achievement.points_required.asc(), Achievement.id.asc())
    ).scalars().all()
    candidates = [a for a in candidates if a.id not in unlocked]
    if not candidates:
        return []

    points = total_points(db, user_id)
    counts = activity_counts(db, user_id)
    conditions = _conditions_by_achievement(db)

    newly_unlocked: list[UnlockedAchievement] = []
    for achievement in candidates:
        if not is_satisfied(achievement, conditions.get(achievement.id, []), points, counts):
            continue
        try:
            with db.begin_nested():
                db.add(UserAchievement(user_id=user_id, achievement_id=achievement.id))
                db.flush()
        except IntegrityError:
            logger.debug("achievement_unlock_race_lost user_id=%s achievement_id=%s", user_id, achievement.id)
            continue
        logger.info("achievement_unlocked user_id=%s achievement_id=%s", user_id, achievement.id)
        newly_unlocked.append(
            UnlockedAchievement(
                id=achievement.id,
                name=achievement.name,
                description=achievement.description,
                icon=achievement.icon,
                points_required=achievement.points_required,
            )
        )
    return newly_unlocked


def evaluate_for_user(db: Session, user_id: str) -> list[UnlockedAchievement]:
    lock_user(db, user_id)
    newly_unlocked = evaluate(db, user_id)
    db.commit()
    return newly_unlocked


def list_achievements(db: Session, user_id: str) -> list[tuple[Achievement, datetime | None]]:
    """All achievements with the caller's unlock time (None while locked)."""
    unlocked_at = dict(
        db.execute(
            select(UserAchievement.achievement_id, UserAchievement.unlocked_at).where(
                UserAchievement.user_id == user_id
            )
        ).all()
    )
    achievements = db.execute(
        select(Achievement).order_by(Achievement.points_required.asc(), Achievement.id.asc())
    ).scalars().all()
    return [(a, unlocked_at.get(a.id)) for a in achievements]


def list_user_achievements(db: Session, user_id: str) -> list[tuple[Achievement, datetime]]:
    stmt = (
        select(Achievement, UserAchievement.unlocked_at)
        .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.unlocked_at.desc(), Achievement.id.desc())
    )
    return [(achievement, unlocked_at) for achievement, unlocked_at in db.execute(stmt).all()]


def progress(db: Session, user_id: str) -> AchievementProgress:
    """Next locked point-gated achievement and progress toward it from the previous threshold."""
    points = total_points(db, user_id)
    unlocked = _unlocked_ids(db, user_id)
    gated = sorted(
        (a for a in db.execute(select(Achievement)).scalars().all() if point_gate(a) > 0),
        key=lambda a: (point_gate(a), a.id),
    )
    upcoming = next((a for a in gated if a.id not in unlocked), None)
    if upcoming is None:
        return AchievementProgress(total_points=points, next_achievement=None, progress_percent=100.0)

    target = point_gate(upcoming)
    lower = [point_gate(a) for a in gated if point_gate(a) < target]
    floor = max(lower) if lower else 0
    percent = (points - floor) / (target - floor) * 100
    return AchievementProgress(
        total_points=points,
        next_achievement=upcoming,
        progress_percent=round(min(100.0, max(0.0, percent)), 1),
    )
