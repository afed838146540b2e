"""Streak, elapsed-time and health-risk fade calculations.

Everything here is pure: callers pass the challenge state and ``today`` and
persist whatever comes back.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Protocol

import pytz

from challenge_engine.core.config import settings
from challenge_engine.core.enums import ChallengeMode


class StreakState(Protocol):
    current_mode: str
    quit_date: date | None
    current_streak_days: int
    longest_streak_days: int
    last_zero_logged_at: date | None


@dataclass(frozen=True)
class StreakUpdate:
    current_mode: str
    quit_date: date | None
    current_streak_days: int
    longest_streak_days: int
    last_zero_logged_at: date | None
    transition_occurred: bool = False

    @classmethod
    def unchanged(cls, state: StreakState) -> "StreakUpdate":
        return cls(
            current_mode=state.current_mode,
            quit_date=state.quit_date,
            current_streak_days=state.current_streak_days,
            longest_streak_days=state.longest_streak_days,
            last_zero_logged_at=state.last_zero_logged_at,
        )


def today_local(now: datetime | None = None) -> date:
    """Calendar day in the configured local timezone."""
    tz = pytz.timezone(settings.local_timezone)
    now_utc = now or datetime.now(timezone.utc)
    return now_utc.astimezone(tz).date()


def days_since_quit(current_mode: str, quit_date: date | None, today: date) -> int:
    """Smoke-free days counting the quit day itself; 0 outside quitting mode."""
    if current_mode != ChallengeMode.QUITTING.value or quit_date is None:
        return 0
    return max(0, (today - quit_date).days + 1)


def health_risk_fade(days: int, fade_start_days: int, fade_end_days: int) -> int:
    """Risk reduction percentage (0-100) after ``days`` smoke-free days."""
    if days < fade_start_days:
        return 0
    if days >= fade_end_days:
        return 100
    ratio = (days - fade_start_days) / (fade_end_days - fade_start_days)
    # half-up, matching what the client displays
    return max(0, min(100, math.floor(100 * ratio + 0.5)))


def apply_primary_observation(state: StreakState, numeric_value: float, observation_date: date) -> StreakUpdate:
    """Decide the mode/streak outcome of one primary-category log."""
    mode = state.current_mode
    is_zero = numeric_value == 0

    if mode in (ChallengeMode.TRACKING.value, ChallengeMode.REDUCTION.value):
        if not is_zero:
            return StreakUpdate.unchanged(state)
        return StreakUpdate(
            current_mode=ChallengeMode.QUITTING.value,
            quit_date=observation_date,
            current_streak_days=1,
            longest_streak_days=max(state.longest_streak_days, 1),
            last_zero_logged_at=observation_date,
            transition_occurred=True,
        )

    if mode != ChallengeMode.QUITTING.value:
        return StreakUpdate.unchanged(state)

    if not is_zero:
        if state.quit_date is not None and observation_date < state.quit_date:
            return StreakUpdate.unchanged(state)
        return StreakUpdate(
            current_mode=ChallengeMode.REDUCTION.value,
            quit_date=state.quit_date,
            current_streak_days=0,
            longest_streak_days=state.longest_streak_days,
            last_zero_logged_at=state.last_zero_logged_at,
            transition_occurred=True,
        )

    reference = state.last_zero_logged_at or state.quit_date
    if reference is None:
        streak = 1
    elif observation_date == reference + timedelta(days=1):
        streak = state.current_streak_days + 1
    elif observation_date > reference:
        streak = 1
    else:
        return StreakUpdate.unchanged(state)

    return StreakUpdate(
        current_mode=mode,
        quit_date=state.quit_date or observation_date,
        current_streak_days=streak,
        longest_streak_days=max(state.longest_streak_days, streak),
        last_zero_logged_at=observation_date,
    )
