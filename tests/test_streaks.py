"""Pure streak, elapsed-time and fade calculations."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

import pytest

from challenge_engine.services.streaks import (
    apply_primary_observation,
    days_since_quit,
    health_risk_fade,
    today_local,
)

DAY = date(2026, 3, 10)


@dataclass
class State:
    current_mode: str = "tracking"
    quit_date: date | None = None
    current_streak_days: int = 0
    longest_streak_days: int = 0
    last_zero_logged_at: date | None = None


def test_days_since_quit_counts_quit_day():
    assert days_since_quit("quitting", DAY, DAY) == 1
    assert days_since_quit("quitting", DAY - timedelta(days=6), DAY) == 7


def test_days_since_quit_zero_outside_quitting():
    assert days_since_quit("reduction", DAY - timedelta(days=30), DAY) == 0
    assert days_since_quit("quitting", None, DAY) == 0


def test_days_since_quit_never_negative():
    assert days_since_quit("quitting", DAY + timedelta(days=3), DAY) == 0


def test_fade_bounds():
    assert health_risk_fade(0, 1, 365) == 0
    assert health_risk_fade(1, 1, 365) == 0
    assert health_risk_fade(365, 1, 365) == 100
    assert health_risk_fade(1000, 1, 365) == 100


def test_fade_interpolates_and_rounds():
    assert health_risk_fade(183, 1, 365) == 50
    assert health_risk_fade(5, 0, 10) == 50
    assert health_risk_fade(1, 0, 3) == 33
    assert health_risk_fade(2, 0, 3) == 67


@pytest.mark.parametrize("window", [(0, 1), (1, 365), (20, 30), (3, 1825)])
def test_fade_monotonic_and_bounded(window):
    start, end = window
    previous = 0
    for days in range(0, end + 50):
        value = health_risk_fade(days, start, end)
        assert 0 <= value <= 100
        assert value >= previous
        previous = value


def test_first_zero_switches_to_quitting():
    update = apply_primary_observation(State(), 0, DAY)
    assert update.transition_occurred
    assert update.current_mode == "quitting"
    assert update.quit_date == DAY
    assert update.current_streak_days == 1
    assert update.longest_streak_days == 1
    assert update.last_zero_logged_at == DAY


def test_positive_count_while_tracking_changes_nothing():
    state = State(current_mode="reduction")
    update = apply_primary_observation(state, 12, DAY)
    assert not update.transition_occurred
    assert update.current_mode == "reduction"
    assert update.current_streak_days == 0


def test_consecutive_zero_extends_streak():
    state = State(current_mode="quitting", quit_date=DAY, current_streak_days=1, longest_streak_days=1, last_zero_logged_at=DAY)
    update = apply_primary_observation(state, 0, DAY + timedelta(days=1))
    assert not update.transition_occurred
    assert update.current_streak_days == 2
    assert update.longest_streak_days == 2
    assert update.last_zero_logged_at == DAY + timedelta(days=1)


def test_zero_after_quit_date_without_previous_log_extends_streak():
    state = State(current_mode="quitting", quit_date=DAY, current_streak_days=1, longest_streak_days=1)
    update = apply_primary_observation(state, 0, DAY + timedelta(days=1))
    assert update.current_streak_days == 2


def test_same_day_zero_is_ignored():
    state = State(current_mode="quitting", quit_date=DAY, current_streak_days=3, longest_streak_days=3, last_zero_logged_at=DAY)
    update = apply_primary_observation(state, 0, DAY)
    assert update.current_streak_days == 3
    assert update.last_zero_logged_at == DAY


def test_zero_after_gap_restarts_streak_but_keeps_longest():
    state = State(current_mode="quitting", quit_date=DAY, current_streak_days=5, longest_streak_days=5, last_zero_logged_at=DAY)
    update = apply_primary_observation(state, 0, DAY + timedelta(days=3))
    assert update.current_streak_days == 1
    assert update.longest_streak_days == 5
    assert update.quit_date == DAY


def test_relapse_returns_to_reduction():
    state = State(current_mode="quitting", quit_date=DAY, current_streak_days=4, longest_streak_days=4, last_zero_logged_at=DAY)
    update = apply_primary_observation(state, 3, DAY + timedelta(days=1))
    assert update.transition_occurred
    assert update.current_mode == "reduction"
    assert update.current_streak_days == 0
    assert update.longest_streak_days == 4
    assert update.quit_date == DAY


def test_backdated_positive_before_quit_date_is_history():
    state = State(current_mode="quitting", quit_date=DAY, current_streak_days=2, longest_streak_days=2, last_zero_logged_at=DAY)
    update = apply_primary_observation(state, 10, DAY - timedelta(days=2))
    assert not update.transition_occurred
    assert update.current_mode == "quitting"
    assert update.current_streak_days == 2


def test_maintenance_mode_ignores_logs():
    state = State(current_mode="maintenance")
    assert not apply_primary_observation(state, 0, DAY).transition_occurred
    assert apply_primary_observation(state, 5, DAY).current_mode == "maintenance"


def test_today_local_uses_configured_timezone():
    # 23:30 UTC is already the next day in Budapest
    now = datetime(2026, 3, 10, 23, 30, tzinfo=timezone.utc)
    assert today_local(now) == date(2026, 3, 11)
