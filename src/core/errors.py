from __future__ import annotations


class InvalidValue(ValueError):
    """First token of the input is missing or not a decimal number."""


class InvalidDateTime(ValueError):
    """Date/time tokens match no accepted pattern or name no real moment."""


class InvalidTimezone(ValueError):
    """Configured input timezone is not a known IANA zone."""
