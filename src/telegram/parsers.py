from __future__ import annotations

from src.core.entries import GlucoseTag

MED_BUTTON_PREFIX = "💊 "

_GLUCOSE_COMMANDS: tuple[tuple[str, GlucoseTag], ...] = (
    ("/addgb", GlucoseTag.BEFORE_MEAL),
    ("/add_glucose_before", GlucoseTag.BEFORE_MEAL),
    ("/addga", GlucoseTag.AFTER_MEAL),
    ("/add_glucose_after", GlucoseTag.AFTER_MEAL),
)
_ADDMED_COMMANDS = ("/addmed", "/add_medication")


def _split_command(text: str) -> tuple[str, str]:
    parts = text.strip().split(None, 1)
    if not parts:
        return "", ""
    head = parts[0]
    if head.startswith("/") and "@" in head:
        head = head.split("@", 1)[0]
    payload = parts[1].strip() if len(parts) > 1 else ""
    return head, payload


def parse_glucose_command(text: str) -> tuple[GlucoseTag, str] | None:
    head, payload = _split_command(text)
    for command, tag in _GLUCOSE_COMMANDS:
        if head == command:
            return tag, payload
    return None


def parse_addmed_command(text: str) -> str | None:
    head, payload = _split_command(text)
    if head in _ADDMED_COMMANDS:
        return payload
    return None


def parse_medication_button(text: str) -> str | None:
    if not text.startswith(MED_BUTTON_PREFIX):
        return None
    return text[len(MED_BUTTON_PREFIX) :].strip()


def medication_button(name: str) -> str:
    return f"{MED_BUTTON_PREFIX}{name}"
