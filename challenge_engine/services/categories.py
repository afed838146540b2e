"""Observation category schema.

Categories are a closed set of kinds (numeric, scale, text). The schema is
built from the built-in defaults overlaid with each active challenge type's
``observation_categories`` and cached for a short while.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from time import monotonic
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from challenge_engine.core.config import settings
from challenge_engine.core.errors import ValidationFailed
from challenge_engine.core.reward_policies import DEFAULT_OBSERVATION_CATEGORIES, MAX_VALUE_LENGTH
from challenge_engine.models.challenge_type import ChallengeType

logger = logging.getLogger(__name__)


class _CategoryBase(BaseModel):
    key: str = Field(min_length=1, max_length=50)
    label: str = ""
    is_active: bool = True


class NumericCategory(_CategoryBase):
    input_type: Literal["numeric", "number"]
    unit: str | None = None
    min: float | None = None
    max: float | None = None


class ScaleCategory(_CategoryBase):
    input_type: Literal["scale"]
    min: int = 1
    max: int = 10


class TextCategory(_CategoryBase):
    input_type: Literal["text"]


CategoryDefinition = Annotated[
    Union[NumericCategory, ScaleCategory, TextCategory],
    Field(discriminator="input_type"),
]

_category_adapter = TypeAdapter(CategoryDefinition)


@dataclass(frozen=True)
class ValidatedValue:
    value: str
    numeric_value: float | None


class CategorySchema:
    def __init__(self, categories: dict[str, NumericCategory | ScaleCategory | TextCategory]):
        self._categories = categories

    def __contains__(self, key: str) -> bool:
        return key in self._categories

    def keys(self) -> list[str]:
        return sorted(self._categories)

    def get(self, key: str) -> NumericCategory | ScaleCategory | TextCategory | None:
        return self._categories.get(key)

    def validate(self, key: str, value: str, numeric_value: float | None) -> ValidatedValue:
        """Check a submission against its category; returns what should be stored."""
        definition = self._categories.get(key)
        if definition is None:
            raise ValidationFailed(f"Unknown observation category: {key}")
        if len(value) > MAX_VALUE_LENGTH:
            raise ValidationFailed(f"Value must be at most {MAX_VALUE_LENGTH} characters")

        if isinstance(definition, TextCategory):
            return ValidatedValue(value=value, numeric_value=None)

        number = numeric_value if numeric_value is not None else _parse_number(value)
        if number is None:
            raise ValidationFailed(f"Category {key} requires a numeric value")
        if not math.isfinite(number):
            raise ValidationFailed(f"Category {key} requires a finite number")

        if isinstance(definition, ScaleCategory) and not float(number).is_integer():
            raise ValidationFailed(f"Category {key} requires a whole number")
        if definition.min is not None and number < definition.min:
            raise ValidationFailed(f"Value for {key} must be >= {definition.min}")
        if definition.max is not None and number > definition.max:
            raise ValidationFailed(f"Value for {key} must be <= {definition.max}")

        return ValidatedValue(value=value or _format_number(number), numeric_value=float(number))


def _parse_number(value: str) -> float | None:
    try:
        return float(value.strip().replace(",", "."))
    except (ValueError, AttributeError):
        return None


def _format_number(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


def parse_category(raw: dict) -> NumericCategory | ScaleCategory | TextCategory | None:
    """Parse one configured category; malformed admin entries are skipped."""
    try:
        return _category_adapter.validate_python(raw)
    except ValidationError:
        logger.warning("category_config_invalid raw=%s", raw)
        return None


def load_category_schema(db: Session) -> CategorySchema:
    categories: dict[str, NumericCategory | ScaleCategory | TextCategory] = {}
    for raw in DEFAULT_OBSERVATION_CATEGORIES:
        parsed = parse_category(raw)
        if parsed:
            categories[parsed.key] = parsed

    result = db.execute(
        select(ChallengeType.observation_categories)
        .where(ChallengeType.is_active.is_(True))
        .order_by(ChallengeType.id.asc())
    )
    for configured in result.scalars().all():
        for raw in configured or []:
            parsed = parse_category(raw)
            if parsed and parsed.is_active:
                categories[parsed.key] = parsed

    return CategorySchema(categories)


_SCHEMA_CACHE: tuple[float, CategorySchema] | None = None


def get_category_schema(db: Session) -> CategorySchema:
    global _SCHEMA_CACHE
    if _SCHEMA_CACHE is not None:
        loaded_at, schema = _SCHEMA_CACHE
        if monotonic() - loaded_at < settings.category_cache_ttl_seconds:
            return schema
    schema = load_category_schema(db)
    _SCHEMA_CACHE = (monotonic(), schema)
    logger.debug("category_schema_loaded keys=%s", schema.keys())
    return schema


def refresh_category_schema() -> None:
    """Drop the cached schema so the next request reloads reference data."""
    global _SCHEMA_CACHE
    _SCHEMA_CACHE = None
