from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum


class GlucoseTag(str, Enum):
    BEFORE_MEAL = "before_meal"
    AFTER_MEAL = "after_meal"


def _require_utc(value: datetime) -> None:
    if value.tzinfo is None or value.utcoffset() != timedelta(0):
        raise ValueError(f"timestamp must be UTC, got {value.isoformat()}")


@dataclass(frozen=True)
class ParsedDateTime:
    """Wall-clock date/time in the input timezone, before conversion."""

    year: int
    month: int
    day: int
    hour: int
    minute: int


@dataclass(frozen=True)
class GlucoseEntry:
    value: Decimal
    timestamp: datetime
    tag: GlucoseTag
    note: str | None = None

    def __post_init__(self) -> None:
        _require_utc(self.timestamp)


@dataclass(frozen=True)
class WeightEntry:
    value_kg: Decimal
    timestamp: datetime

    def __post_init__(self) -> None:
        _require_utc(self.timestamp)


@dataclass(frozen=True)
class MedicationUse:
    name: str
    timestamp: datetime

    def __post_init__(self) -> None:
        _require_utc(self.timestamp)
