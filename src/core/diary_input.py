from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Sequence

from src.core.entries import GlucoseEntry, GlucoseTag, ParsedDateTime, WeightEntry
from src.core.errors import InvalidDateTime, InvalidValue
from src.core.timezones import load_timezone, now_utc, to_utc, today_in

NOTE_MARKER = "@"
DATETIME_EXAMPLES = "2/1 9:05, 02/01 09:05, 24/2/1 9:05, 2024/2/1 9:05"

_DATE_SEPARATORS = str.maketrans({"-": "/", ".": "/"})
_SHORT_NUMBER_RE = re.compile(r"[0-9]{1,2}")
_YEAR_RE = re.compile(r"[0-9]{2,4}")
_TIME_RE = re.compile(r"([0-9]{1,2}):([0-9]{1,2})")


@dataclass(frozen=True)
class GlucoseInput:
    value: Decimal
    datetime_tokens: tuple[str, ...]
    note: str | None


def parse_decimal(text: str) -> Decimal | None:
    normalized = (text or "").strip().replace(",", ".")
    if not normalized:
        return None
    try:
        value = Decimal(normalized)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def split_note(text: str) -> tuple[str, str | None]:
    head, marker, tail = text.partition(NOTE_MARKER)
    if not marker:
        return text.strip(), None
    if tail.startswith(" "):
        tail = tail[1:]
    return head.strip(), tail or None


def split_glucose_input(text: str) -> GlucoseInput:
    """Split ``<value> [date time] [@note]`` into its parts.

    Only the value is checked here; date/time tokens are returned as-is.
    """
    head, note = split_note(text or "")
    tokens = head.split()
    if not tokens:
        raise InvalidValue("Missing glucose value. Example: 5.8")
    value = parse_decimal(tokens[0])
    if value is None:
        raise InvalidValue("Invalid glucose value. Example: 5.8")
    return GlucoseInput(value=value, datetime_tokens=tuple(tokens[1:]), note=note)


def _invalid(reason: str) -> InvalidDateTime:
    return InvalidDateTime(f"Invalid date/time ({reason}). Examples: {DATETIME_EXAMPLES}")


def _short_number(token: str, field: str) -> int:
    if not _SHORT_NUMBER_RE.fullmatch(token):
        raise _invalid(f"bad {field} '{token}'")
    return int(token)


def _year(token: str, today: date) -> int:
    if not _YEAR_RE.fullmatch(token):
        raise _invalid(f"bad year '{token}'")
    year = int(token)
    if year < 100:
        year += today.year // 100 * 100
    return year


def parse_datetime_tokens(tokens: Sequence[str], *, today: date) -> ParsedDateTime | None:
    if not tokens:
        return None
    if len(tokens) != 2:
        raise _invalid("expected date and time")

    date_part, time_part = tokens
    date_fields = date_part.translate(_DATE_SEPARATORS).split("/")
    if len(date_fields) == 2:
        year = today.year
        month = _short_number(date_fields[0], "month")
        day = _short_number(date_fields[1], "day")
    elif len(date_fields) == 3:
        year = _year(date_fields[0], today)
        month = _short_number(date_fields[1], "month")
        day = _short_number(date_fields[2], "day")
    else:
        raise _invalid(f"bad date '{date_part}'")

    match = _TIME_RE.fullmatch(time_part)
    if match is None:
        raise _invalid(f"bad time '{time_part}'")
    hour, minute = int(match.group(1)), int(match.group(2))

    try:
        datetime(year, month, day, hour, minute)
    except ValueError as exc:
        raise _invalid(str(exc)) from exc
    return ParsedDateTime(year=year, month=month, day=day, hour=hour, minute=minute)


def parse_glucose_entry(
    text: str,
    tag: GlucoseTag,
    tz_name: str,
    *,
    now: datetime | None = None,
) -> GlucoseEntry:
    load_timezone(tz_name)
    raw = split_glucose_input(text)
    parsed = parse_datetime_tokens(raw.datetime_tokens, today=today_in(tz_name, now))
    timestamp = to_utc(parsed, tz_name, now=now)
    return GlucoseEntry(value=raw.value, timestamp=timestamp, tag=tag, note=raw.note)


def parse_weight_entry(text: str, *, now: datetime | None = None) -> WeightEntry:
    value = parse_decimal(text)
    if value is None:
        raise InvalidValue("Could not parse number. Use format like 78.4 (dot or comma).")
    return WeightEntry(value_kg=value, timestamp=now_utc(now))
