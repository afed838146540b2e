"""Reward ledger idempotency."""

from datetime import date, timedelta

import pytest
from sqlalchemy import func, select

from challenge_engine.core.errors import NotFound, ValidationFailed
from challenge_engine.models import PointEntry, UserActivityCount
from challenge_engine.services import ledger_service, rewards_service

TODAY = date(2026, 3, 10)


def _entry_count(db, user_id):
    return db.execute(select(func.count(PointEntry.id)).where(PointEntry.user_id == user_id)).scalar_one()


def _sum_points(db, user_id):
    return sum(db.execute(select(PointEntry.points).where(PointEntry.user_id == user_id)).scalars().all())


def test_idempotency_keys_per_frequency():
    assert ledger_service.idempotency_key_for("daily", "lab_upload", TODAY) == "daily:lab_upload:2026-03-10"
    assert ledger_service.idempotency_key_for("once_total", "lab_upload", TODAY) == "once:lab_upload"
    assert ledger_service.idempotency_key_for("per_event", "questionnaire_completion", TODAY, "q-1") == (
        "event:questionnaire_completion:q-1"
    )
    with pytest.raises(ValidationFailed):
        ledger_service.idempotency_key_for("per_event", "questionnaire_completion", TODAY)


def test_duplicate_key_is_rejected(db):
    first = ledger_service.credit(db, "u1", 50, "Milestone", idempotency_key="milestone:1:1")
    second = ledger_service.credit(db, "u1", 50, "Milestone", idempotency_key="milestone:1:1")
    db.commit()

    assert first.granted
    assert second.already_rewarded
    assert second.points == 0
    assert second.total_points == 50
    assert _entry_count(db, "u1") == 1


def test_same_key_for_other_user_is_independent(db):
    ledger_service.credit(db, "u1", 5, "x", idempotency_key="once:lab_upload")
    result = ledger_service.credit(db, "u2", 5, "x", idempotency_key="once:lab_upload")
    assert result.granted


def test_per_event_award_needs_correlation_key(db, make_rule):
    make_rule("questionnaire_completion", points=10)
    for _ in range(2):
        with pytest.raises(ValidationFailed):
            rewards_service.award_activity_points(db, "u1", "questionnaire_completion", today=TODAY)
        db.rollback()
    assert _entry_count(db, "u1") == 0
    assert ledger_service.activity_counts(db, "u1") == {}


def test_non_positive_points_rejected(db):
    with pytest.raises(ValidationFailed):
        ledger_service.credit(db, "u1", 0, "nothing")


def test_total_matches_sum_of_entries(db, make_rule):
    make_rule("questionnaire_completion", points=20)
    make_rule("lab_upload", points=30, frequency="daily")
    for n in range(3):
        rewards_service.award_activity_points(db, "u1", "questionnaire_completion", correlation_key=f"q{n}", today=TODAY)
    rewards_service.award_activity_points(db, "u1", "lab_upload", today=TODAY)
    rewards_service.award_activity_points(db, "u1", "lab_upload", today=TODAY)

    assert ledger_service.total_points(db, "u1") == _sum_points(db, "u1") == 90


def test_daily_rule_once_per_day(db, make_rule):
    make_rule("lab_upload", points=30, frequency="daily")

    first = rewards_service.award_activity_points(db, "u1", "lab_upload", today=TODAY)
    again = rewards_service.award_activity_points(db, "u1", "lab_upload", today=TODAY)
    tomorrow = rewards_service.award_activity_points(db, "u1", "lab_upload", today=TODAY + timedelta(days=1))

    assert first.credit.granted
    assert again.credit.already_rewarded
    assert tomorrow.credit.granted
    assert ledger_service.total_points(db, "u1") == 60


def test_once_total_rule_grants_once(db, make_rule):
    make_rule("discharge_upload", points=100, frequency="once_total")
    results = [
        rewards_service.award_activity_points(db, "u1", "discharge_upload", today=TODAY + timedelta(days=n))
        for n in range(4)
    ]
    assert [r.credit.granted for r in results] == [True, False, False, False]
    assert _entry_count(db, "u1") == 1


def test_per_event_duplicate_correlation_key(db, make_rule):
    make_rule("questionnaire_completion", points=25)
    first = rewards_service.award_activity_points(db, "u1", "questionnaire_completion", correlation_key="q-7")
    retry = rewards_service.award_activity_points(db, "u1", "questionnaire_completion", correlation_key="q-7")
    assert first.credit.granted
    assert retry.credit.already_rewarded
    assert ledger_service.total_points(db, "u1") == 25


def test_activity_counts_only_granted(db, make_rule):
    make_rule("lab_upload", points=30, frequency="daily")
    rewards_service.award_activity_points(db, "u1", "lab_upload", today=TODAY)
    rewards_service.award_activity_points(db, "u1", "lab_upload", today=TODAY)
    rewards_service.award_activity_points(db, "u1", "lab_upload", today=TODAY + timedelta(days=1))

    counts = ledger_service.activity_counts(db, "u1")
    assert counts == {"lab_upload": 2}
    row = db.execute(select(UserActivityCount).where(UserActivityCount.user_id == "u1")).scalar_one()
    assert row.last_activity_date == TODAY + timedelta(days=1)


def test_unknown_or_inactive_rule(db, make_rule):
    make_rule("lab_upload", is_active=False)
    with pytest.raises(NotFound):
        rewards_service.award_activity_points(db, "u1", "lab_upload")
    with pytest.raises(NotFound):
        rewards_service.award_activity_points(db, "u1", "questionnaire_completion")
    with pytest.raises(ValidationFailed):
        rewards_service.award_activity_points(db, "u1", "made_up_activity")


def test_upload_points_once_per_type_per_day(db):
    first = rewards_service.award_upload_points(db, "u1", "lab", today=TODAY)
    again = rewards_service.award_upload_points(db, "u1", "lab", 40, today=TODAY)
    other = rewards_service.award_upload_points(db, "u1", "discharge", 40, today=TODAY)

    assert first.credit.granted and first.credit.points == 30
    assert again.credit.already_rewarded
    assert other.credit.granted
    assert ledger_service.total_points(db, "u1") == 70


def test_upload_points_bounds(db):
    with pytest.raises(ValidationFailed):
        rewards_service.award_upload_points(db, "u1", "lab", 0)
    with pytest.raises(ValidationFailed):
        rewards_service.award_upload_points(db, "u1", "lab", 100_000)
