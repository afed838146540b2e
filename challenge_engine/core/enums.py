"""Closed value sets shared by models, schemas and services."""

from __future__ import annotations

import enum


class ChallengeStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


OPEN_STATUSES = (ChallengeStatus.ACTIVE.value, ChallengeStatus.PAUSED.value)
TERMINAL_STATUSES = (ChallengeStatus.COMPLETED.value, ChallengeStatus.CANCELLED.value)


class ChallengeMode(str, enum.Enum):
    TRACKING = "tracking"
    REDUCTION = "reduction"
    QUITTING = "quitting"
    MAINTENANCE = "maintenance"


class ActivityType(str, enum.Enum):
    QUESTIONNAIRE_COMPLETION = "questionnaire_completion"
    LAB_UPLOAD = "lab_upload"
    DISCHARGE_UPLOAD = "discharge_upload"
    PATIENT_SUMMARY_UPLOAD = "patient_summary_upload"
    OBSERVATION_CREATION = "observation_creation"


class RewardFrequency(str, enum.Enum):
    PER_EVENT = "per_event"
    DAILY = "daily"
    ONCE_TOTAL = "once_total"


class CategoryKind(str, enum.Enum):
    NUMERIC = "numeric"
    SCALE = "scale"
    TEXT = "text"
