from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.core.entries import ParsedDateTime
from src.core.errors import InvalidDateTime, InvalidTimezone


def load_timezone(name: str) -> ZoneInfo:
    key = (name or "").strip()
    if not key:
        raise InvalidTimezone("Timezone is not configured")
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidTimezone(f"Unknown timezone: {key}") from exc


def now_utc(now: datetime | None = None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    return now.astimezone(timezone.utc)


def today_in(tz_name: str, now: datetime | None = None) -> date:
    tz = load_timezone(tz_name)
    return now_utc(now).astimezone(tz).date()


def to_utc(
    parsed: ParsedDateTime | None,
    tz_name: str,
    *,
    now: datetime | None = None,
) -> datetime:
    """Convert a wall-clock time in ``tz_name`` to a UTC instant.

    ``None`` means "no explicit time" and yields the current moment.
    Ambiguous wall-clock times (DST fall-back) resolve to the earlier
    instant; times skipped by a DST jump are rejected.
    """
    tz = load_timezone(tz_name)
    if parsed is None:
        return now_utc(now)

    try:
        local = datetime(
            parsed.year,
            parsed.month,
            parsed.day,
            parsed.hour,
            parsed.minute,
            tzinfo=tz,
            fold=0,
        )
    except ValueError as exc:
        raise InvalidDateTime(f"Invalid date/time: {exc}") from exc

    try:
        converted = local.astimezone(timezone.utc)
        back = converted.astimezone(tz)
    except OverflowError as exc:
        raise InvalidDateTime(f"{local:%Y-%m-%d %H:%M} is out of the supported range") from exc
    if back.replace(tzinfo=None) != local.replace(tzinfo=None):
        raise InvalidDateTime(
            f"{local:%Y-%m-%d %H:%M} does not exist in {tz.key} (DST change)"
        )
    return converted
