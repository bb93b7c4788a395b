from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from src.core.diary_input import (
    parse_datetime_tokens,
    parse_decimal,
    parse_glucose_entry,
    parse_weight_entry,
    split_glucose_input,
    split_note,
)
from src.core.entries import GlucoseTag, ParsedDateTime
from src.core.errors import InvalidDateTime, InvalidTimezone, InvalidValue

NOW = datetime(2026, 10, 18, 12, 30, tzinfo=timezone.utc)
TODAY = date(2026, 10, 18)


def test_value_only() -> None:
    raw = split_glucose_input("5.8")
    assert raw.value == Decimal("5.8")
    assert raw.datetime_tokens == ()
    assert raw.note is None

    entry = parse_glucose_entry("5.8", GlucoseTag.BEFORE_MEAL, "UTC", now=NOW)
    assert entry.value == Decimal("5.8")
    assert entry.timestamp == NOW
    assert entry.note is None


def test_month_day_uses_current_year() -> None:
    raw = split_glucose_input("7.2 2/1 11:00")
    assert raw.value == Decimal("7.2")
    parsed = parse_datetime_tokens(raw.datetime_tokens, today=TODAY)
    assert parsed == ParsedDateTime(year=2026, month=2, day=1, hour=11, minute=0)


def test_full_date_with_note() -> None:
    entry = parse_glucose_entry(
        "6.4 2024/2/1 09:05 @after oatmeal + tea",
        GlucoseTag.AFTER_MEAL,
        "UTC",
        now=NOW,
    )
    assert entry.value == Decimal("6.4")
    assert entry.timestamp == datetime(2024, 2, 1, 9, 5, tzinfo=timezone.utc)
    assert entry.tag is GlucoseTag.AFTER_MEAL
    assert entry.note == "after oatmeal + tea"


def test_malformed_date_rejected() -> None:
    with pytest.raises(InvalidDateTime):
        parse_glucose_entry("6.4 13/40 09:05", GlucoseTag.BEFORE_MEAL, "UTC", now=NOW)


def test_missing_value_rejected() -> None:
    with pytest.raises(InvalidValue):
        split_glucose_input("@note only")
    with pytest.raises(InvalidValue):
        parse_glucose_entry("@note only", GlucoseTag.BEFORE_MEAL, "UTC", now=NOW)


@pytest.mark.parametrize("text", ["abc", "nan", "inf", "5.8.1", "-"])
def test_non_numeric_value_rejected(text: str) -> None:
    with pytest.raises(InvalidValue):
        split_glucose_input(text)


def test_decimal_comma() -> None:
    assert parse_decimal("5,8") == Decimal("5.8")
    assert parse_decimal(" 78.4 ") == Decimal("78.4")
    assert parse_decimal("") is None
    assert parse_decimal("Infinity") is None


def test_split_note_variants() -> None:
    assert split_note("5.8 @ hello world") == ("5.8", "hello world")
    assert split_note("5.8 @") == ("5.8", None)
    assert split_note("5.8 @a @b,  c") == ("5.8", "a @b,  c")
    assert split_note("5.8 2/1 9:05") == ("5.8 2/1 9:05", None)


@pytest.mark.parametrize(
    "date_part",
    ["2024/2/1", "2024-02-01", "2024.2.01", "24/2/1", "24-02-01"],
)
def test_date_separators_and_year_lengths(date_part: str) -> None:
    parsed = parse_datetime_tokens([date_part, "9:05"], today=TODAY)
    assert parsed == ParsedDateTime(year=2024, month=2, day=1, hour=9, minute=5)


def test_single_digit_minute_accepted() -> None:
    parsed = parse_datetime_tokens(["02/01", "7:5"], today=TODAY)
    assert parsed is not None
    assert (parsed.hour, parsed.minute) == (7, 5)


def test_no_tokens_means_now() -> None:
    assert parse_datetime_tokens([], today=TODAY) is None


@pytest.mark.parametrize(
    "tokens",
    [
        ["2/1"],
        ["2/1", "9:05", "extra"],
        ["123/1", "9:05"],
        ["2/1/2024/5", "9:05"],
        ["2", "9:05"],
        ["2/2/1", "9:05"],
        ["12345/1/1", "9:05"],
        ["2024/2/1", "9.05"],
        ["2024/2/1", "905"],
        ["2024/2/1", "24:00"],
        ["2024/2/1", "10:60"],
        ["2/30", "10:00"],
        ["0/1", "10:00"],
        ["2/1", "+9:05"],
        ["2/1", "9:005"],
    ],
)
def test_invalid_datetime_tokens(tokens: list[str]) -> None:
    with pytest.raises(InvalidDateTime):
        parse_datetime_tokens(tokens, today=TODAY)


def test_local_time_converted_to_utc() -> None:
    entry = parse_glucose_entry(
        "6.4 2024/2/1 09:05", GlucoseTag.BEFORE_MEAL, "Europe/Moscow", now=NOW
    )
    assert entry.timestamp == datetime(2024, 2, 1, 6, 5, tzinfo=timezone.utc)


def test_default_year_follows_input_timezone() -> None:
    now = datetime(2024, 12, 31, 22, 0, tzinfo=timezone.utc)
    entry = parse_glucose_entry("5.0 1/1 8:00", GlucoseTag.BEFORE_MEAL, "Asia/Tokyo", now=now)
    assert entry.timestamp == datetime(2024, 12, 31, 23, 0, tzinfo=timezone.utc)


def test_unknown_timezone_rejected_before_parsing() -> None:
    with pytest.raises(InvalidTimezone):
        parse_glucose_entry("not-a-number", GlucoseTag.BEFORE_MEAL, "Nowhere/City", now=NOW)


def test_weight_entry() -> None:
    entry = parse_weight_entry("78,4", now=NOW)
    assert entry.value_kg == Decimal("78.4")
    assert entry.timestamp == NOW
    with pytest.raises(InvalidValue):
        parse_weight_entry("heavy", now=NOW)


def test_far_future_date_reports_invalid_datetime() -> None:
    with pytest.raises(InvalidDateTime):
        parse_glucose_entry(
            "5.8 9999/12/31 23:00", GlucoseTag.BEFORE_MEAL, "America/New_York", now=NOW
        )


@pytest.mark.parametrize(
    ("year_token", "expected"),
    [("24", 2024), ("0024", 2024), ("099", 2099), ("100", 100), ("1999", 1999)],
)
def test_year_below_100_gets_current_century(year_token: str, expected: int) -> None:
    parsed = parse_datetime_tokens([f"{year_token}/6/1", "8:00"], today=TODAY)
    assert parsed is not None
    assert parsed.year == expected
