"""Activity and upload rewards: ledger credit plus achievement evaluation in one unit."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from challenge_engine.core.config import settings
from challenge_engine.core.enums import ActivityType
from challenge_engine.core.errors import ValidationFailed
from challenge_engine.db.locks import lock_user
from challenge_engine.services import achievement_service
from challenge_engine.services.achievement_service import UnlockedAchievement
from challenge_engine.services.ledger_service import (
    CreditResult,
    credit,
    credit_activity,
    get_active_rule,
    upload_key,
)
from challenge_engine.services.streaks import today_local


@dataclass
class AwardResult:
    credit: CreditResult
    new_achievements: list[UnlockedAchievement] = field(default_factory=list)


def award_activity_points(
    db: Session,
    user_id: str,
    activity_type: ActivityType | str,
    *,
    description: str | None = None,
    correlation_key: str | None = None,
    today: date | None = None,
) -> AwardResult:
    """Credit an activity per its reward rule, evaluate achievements, commit."""
    try:
        activity = ActivityType(activity_type).value
    except ValueError as exc:
        raise ValidationFailed(f"Unknown activity type: {activity_type}") from exc
    lock_user(db, user_id)
    rule = get_active_rule(db, activity)
    result = credit_activity(
        db,
        user_id,
        rule,
        description=description,
        correlation_key=correlation_key,
        today=today,
    )
    new_achievements = achievement_service.evaluate(db, user_id) if result.granted else []
    db.commit()
    return AwardResult(credit=result, new_achievements=new_achievements)


def award_upload_points(
    db: Session,
    user_id: str,
    upload_type: str,
    points: int | None = None,
    *,
    today: date | None = None,
) -> AwardResult:
    """One grant per upload type per calendar day."""
    amount = settings.default_upload_points if points is None else points
    if amount <= 0 or amount > settings.max_upload_points:
        raise ValidationFailed(f"Upload points must be between 1 and {settings.max_upload_points}")
    upload_type = upload_type.strip()
    if not upload_type:
        raise ValidationFailed("Upload type is required")
    day = today or today_local()

    lock_user(db, user_id)
    result = credit(
        db,
        user_id,
        amount,
        f"{upload_type} upload",
        idempotency_key=upload_key(upload_type, day),
        correlation_key=upload_type,
    )
    new_achievements = achievement_service.evaluate(db, user_id) if result.granted else []
    db.commit()
    return AwardResult(credit=result, new_achievements=new_achievements)
