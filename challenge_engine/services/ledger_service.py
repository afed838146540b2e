"""Reward ledger: idempotent point grants.

Every guarded grant is one INSERT into ``point_entries`` protected by the
unique (user_id, idempotency_key) constraint, run inside a SAVEPOINT. A
duplicate key (double submit, retry, concurrent request) rolls back only
that savepoint and is reported as ``already_rewarded``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import desc, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from challenge_engine.core.enums import RewardFrequency
from challenge_engine.core.errors import NotFound, ValidationFailed
from challenge_engine.core.reward_policies import (
    DAILY_KEY_PREFIX,
    EVENT_KEY_PREFIX,
    MILESTONE_KEY_PREFIX,
    ONCE_KEY_PREFIX,
    UPLOAD_KEY_PREFIX,
)
from challenge_engine.models.points import PointEntry, RewardRule, UserActivityCount
from challenge_engine.services.streaks import today_local

logger = logging.getLogger(__name__)


@dataclass
class CreditResult:
    granted: bool
    points: int
    total_points: int
    entry: PointEntry | None = None

    @property
    def already_rewarded(self) -> bool:
        return not self.granted


def total_points(db: Session, user_id: str) -> int:
    result = db.execute(
        select(func.coalesce(func.sum(PointEntry.points), 0)).where(PointEntry.user_id == user_id)
    )
    return int(result.scalar_one())


def idempotency_key_for(
    frequency: str,
    activity_type: str,
    day: date,
    correlation_key: str | None = None,
) -> str:
    """Key that makes a grant at-most-once for the rule's frequency."""
    if frequency == RewardFrequency.DAILY.value:
        return f"{DAILY_KEY_PREFIX}:{activity_type}:{day.isoformat()}"
    if frequency == RewardFrequency.ONCE_TOTAL.value:
        return f"{ONCE_KEY_PREFIX}:{activity_type}"
    if not correlation_key:
        raise ValidationFailed(f"Activity {activity_type} is rewarded per event and needs a correlation key")
    return f"{EVENT_KEY_PREFIX}:{activity_type}:{correlation_key}"


def milestone_key(user_challenge_id: int, milestone_id: int) -> str:
    return f"{MILESTONE_KEY_PREFIX}:{user_challenge_id}:{milestone_id}"


def upload_key(upload_type: str, day: date) -> str:
    return f"{UPLOAD_KEY_PREFIX}:{upload_type}:{day.isoformat()}"


def credit(
    db: Session,
    user_id: str,
    points: int,
    reason: str,
    *,
    idempotency_key: str | None = None,
    activity_type: str | None = None,
    correlation_key: str | None = None,
) -> CreditResult:
    """Insert one point entry unless ``idempotency_key`` was already used by this user.

    Flushes but does not commit; the caller owns the transaction.
    """
    if points <= 0:
        raise ValidationFailed("Points must be positive")

    entry = PointEntry(
        user_id=user_id,
        points=points,
        reason=reason,
        activity_type=activity_type,
        correlation_key=correlation_key,
        idempotency_key=idempotency_key,
    )
    try:
        with db.begin_nested():
            db.add(entry)
            db.flush()
    except IntegrityError:
        logger.info("points_already_rewarded user_id=%s key=%s", user_id, idempotency_key)
        return CreditResult(granted=False, points=0, total_points=total_points(db, user_id))

    logger.info("points_credited user_id=%s points=%s key=%s", user_id, points, idempotency_key)
    return CreditResult(granted=True, points=points, total_points=total_points(db, user_id), entry=entry)


def get_active_rule(db: Session, activity_type: str) -> RewardRule:
    rule = db.execute(
        select(RewardRule).where(RewardRule.activity_type == activity_type, RewardRule.is_active.is_(True))
    ).scalar_one_or_none()
    if not rule:
        raise NotFound(f"No active reward rule for activity type {activity_type}")
    return rule


def find_active_rule(db: Session, activity_type: str) -> RewardRule | None:
    try:
        return get_active_rule(db, activity_type)
    except NotFound:
        return None


def _bump_activity_count(db: Session, user_id: str, activity_type: str, day: date) -> None:
    existing = db.execute(
        select(UserActivityCount.id).where(
            UserActivityCount.user_id == user_id,
            UserActivityCount.activity_type == activity_type,
        )
    ).scalar_one_or_none()
    if existing is None:
        try:
            with db.begin_nested():
                db.execute(insert(UserActivityCount).values(user_id=user_id, activity_type=activity_type, total_count=0))
        except IntegrityError:
            # Concurrent request created the row first; the increment below still applies.
            logger.debug("activity_count_row_exists user_id=%s activity_type=%s", user_id, activity_type)

    db.execute(
        update(UserActivityCount)
        .where(
            UserActivityCount.user_id == user_id,
            UserActivityCount.activity_type == activity_type,
        )
        .values(total_count=UserActivityCount.total_count + 1, last_activity_date=day)
        .execution_options(synchronize_session=False)
    )


def credit_activity(
    db: Session,
    user_id: str,
    rule: RewardRule,
    *,
    description: str | None = None,
    correlation_key: str | None = None,
    today: date | None = None,
) -> CreditResult:
    """Grant points for an activity according to its rule; counts only granted activities."""
    day = today or today_local()
    key = idempotency_key_for(rule.frequency, rule.activity_type, day, correlation_key)
    result = credit(
        db,
        user_id,
        rule.points,
        description or rule.activity_type,
        idempotency_key=key,
        activity_type=rule.activity_type,
        correlation_key=correlation_key,
    )
    if result.granted:
        _bump_activity_count(db, user_id, rule.activity_type, day)
    return result


def list_history(db: Session, user_id: str, limit: int = 50) -> list[PointEntry]:
    stmt = (
        select(PointEntry)
        .where(PointEntry.user_id == user_id)
        .order_by(desc(PointEntry.created_at), desc(PointEntry.id))
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def activity_counts(db: Session, user_id: str) -> dict[str, int]:
    result = db.execute(
        select(UserActivityCount.activity_type, UserActivityCount.total_count).where(
            UserActivityCount.user_id == user_id
        )
    )
    return {activity: count for activity, count in result.all()}
