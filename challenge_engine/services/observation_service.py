"""Observation store and the log-observation workflow."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from challenge_engine.core.config import settings
from challenge_engine.core.enums import ActivityType
from challenge_engine.core.errors import ValidationFailed
from challenge_engine.db.locks import lock_user
from challenge_engine.models.observation import Observation
from challenge_engine.services import achievement_service, challenge_service, milestone_service
from challenge_engine.services.achievement_service import UnlockedAchievement
from challenge_engine.services.categories import get_category_schema
from challenge_engine.services.ledger_service import credit_activity, find_active_rule
from challenge_engine.services.milestone_service import UnlockedMilestone
from challenge_engine.services.streaks import today_local

logger = logging.getLogger(__name__)


@dataclass
class LogObservationResult:
    observation: Observation
    transition_occurred: bool = False
    new_mode: str | None = None
    current_streak_days: int | None = None
    unlocked_milestones: list[UnlockedMilestone] = field(default_factory=list)
    points_awarded: int = 0
    new_achievements: list[UnlockedAchievement] = field(default_factory=list)


def record(
    db: Session,
    user_id: str,
    category: str,
    value: str,
    numeric_value: float | None = None,
    note: str | None = None,
    observation_date: date | None = None,
    *,
    today: date | None = None,
) -> Observation:
    """Validate and append one observation. Flushes; challenge state is not touched."""
    today = today or today_local()
    day = observation_date or today
    if day > today:
        raise ValidationFailed("Observation date cannot be in the future")

    validated = get_category_schema(db).validate(category, (value or "").strip(), numeric_value)
    observation = Observation(
        user_id=user_id,
        category=category,
        value=validated.value,
        numeric_value=validated.numeric_value,
        note=note.strip() if note and note.strip() else None,
        observation_date=day,
    )
    db.add(observation)
    db.flush()
    return observation


def log_observation(
    db: Session,
    user_id: str,
    category: str,
    value: str,
    numeric_value: float | None = None,
    note: str | None = None,
    observation_date: date | None = None,
    *,
    today: date | None = None,
) -> LogObservationResult:
    """Record an observation and everything it triggers, committed as one unit.

    Active challenges driven by ``category`` get their mode/streak updated and
    their milestones evaluated; the observation activity is credited when a
    reward rule exists for it; achievements are evaluated last.
    """
    today = today or today_local()
    lock_user(db, user_id)
    observation = record(
        db,
        user_id,
        category,
        value,
        numeric_value,
        note,
        observation_date,
        today=today,
    )
    result = LogObservationResult(observation=observation)

    if observation.numeric_value is not None:
        for challenge in challenge_service.list_active_for_category(db, user_id, category):
            update = challenge_service.apply_observation(
                challenge, observation.numeric_value, observation.observation_date
            )
            if update.transition_occurred and not result.transition_occurred:
                result.transition_occurred = True
                result.new_mode = update.current_mode
                result.current_streak_days = update.current_streak_days
            elif result.current_streak_days is None:
                result.current_streak_days = update.current_streak_days
            db.flush()
            checked = milestone_service.evaluate(db, challenge, today=today)
            result.unlocked_milestones.extend(checked.unlocked_milestones)

    rule = find_active_rule(db, ActivityType.OBSERVATION_CREATION.value)
    if rule:
        credited = credit_activity(
            db,
            user_id,
            rule,
            correlation_key=str(observation.id),
            today=today,
        )
        result.points_awarded = credited.points

    if result.points_awarded or result.unlocked_milestones:
        result.new_achievements = achievement_service.evaluate(db, user_id)

    db.commit()
    logger.info(
        "observation_logged user_id=%s observation_id=%s category=%s transition=%s",
        user_id,
        observation.id,
        category,
        result.transition_occurred,
    )
    return result


def list_history(
    db: Session,
    user_id: str,
    *,
    category: str | None = None,
    limit: int | None = None,
) -> list[Observation]:
    stmt = select(Observation).where(Observation.user_id == user_id)
    if category:
        stmt = stmt.where(Observation.category == category)
    stmt = stmt.order_by(
        desc(Observation.observation_date),
        desc(Observation.created_at),
        desc(Observation.id),
    ).limit(min(limit or settings.observation_history_limit, settings.observation_history_limit))
    return list(db.execute(stmt).scalars().all())


def latest_by_category(db: Session, user_id: str) -> dict[str, Observation]:
    """Most recent submission per category; same-day entries resolve by creation order."""
    newest = (
        select(Observation.category, func.max(Observation.id).label("max_id"))
        .where(Observation.user_id == user_id)
        .group_by(Observation.category)
        .subquery()
    )
    rows = db.execute(
        select(Observation).join(newest, Observation.id == newest.c.max_id).order_by(Observation.category.asc())
    ).scalars().all()
    return {row.category: row for row in rows}
