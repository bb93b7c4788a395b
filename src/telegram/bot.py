from __future__ import annotations

from enum import Enum
from pathlib import Path

from aiogram import Dispatcher, F, types
from aiogram.filters import Command
from aiogram.types import KeyboardButton, ReplyKeyboardMarkup
from loguru import logger

from src.config import settings
from src.core.diary_input import parse_glucose_entry, parse_weight_entry
from src.core.entries import GlucoseTag, MedicationUse
from src.core.errors import InvalidDateTime, InvalidTimezone, InvalidValue
from src.core.timezones import now_utc
from src.storage.diary_repo import append_glucose, append_medication_use, append_weight
from src.storage.medications_repo import add_medication, find_medication, load_medications
from src.telegram.parsers import (
    medication_button,
    parse_addmed_command,
    parse_glucose_command,
    parse_medication_button,
)

dp = Dispatcher()

BTN_GLUCOSE_BEFORE_MEAL = "🩸 Glucose: Before meal"
BTN_GLUCOSE_AFTER_MEAL = "🩸 Glucose: After meal"
BTN_WEIGHT = "⚖️ Weight"
BTN_SHOW_MENU = "📋 Show menu"

MENU_TEXT = (
    "Diabetes diary menu:\n"
    "- Glucose before meal\n"
    "- Glucose after meal\n"
    "- Weight\n"
    "- Medications\n"
    "Use /addmed <name> to add medication button.\n"
    "Use /addgb or /addga for direct glucose entry with optional date/time."
)
HELP_TEXT = (
    "Commands:\n"
    "/menu - show menu buttons\n"
    "/help - show this help\n"
    "/addmed <name> - add medication button\n"
    "/addgb <value> [date time] [@note] - add glucose before meal\n"
    "/addga <value> [date time] [@note] - add glucose after meal\n\n"
    "Date/time examples:\n"
    "- 2/1 9:05\n"
    "- 02/01 09:05\n"
    "- 24/2/1 9:05\n"
    "- 2024/2/1 9:05\n"
    "If year is omitted, current year is used.\n"
    "Note example: @before breakfast\n\n"
    "Warning: data is stored as plain text CSV/TXT and is not encrypted by this bot."
)
GLUCOSE_USAGE_TEXT = (
    "Usage:\n"
    "/addgb <value> [MM/DD hh:mm] [@note]\n"
    "/addga <value> [MM/DD hh:mm] [@note]"
)
ADDMED_USAGE_TEXT = "Usage: /addmed <medication name>"
FALLBACK_TEXT = "Choose an action from menu. Type /menu to show buttons or /addmed <name>."
TIMEZONE_ERROR_TEXT = "Bot timezone is misconfigured, entry not saved."


class PendingEntry(str, Enum):
    GLUCOSE_BEFORE_MEAL = "glucose_before_meal"
    GLUCOSE_AFTER_MEAL = "glucose_after_meal"
    WEIGHT = "weight"


_PENDING_GLUCOSE_TAGS = {
    PendingEntry.GLUCOSE_BEFORE_MEAL: GlucoseTag.BEFORE_MEAL,
    PendingEntry.GLUCOSE_AFTER_MEAL: GlucoseTag.AFTER_MEAL,
}
_PENDING_BUTTONS = {
    BTN_GLUCOSE_BEFORE_MEAL: (
        PendingEntry.GLUCOSE_BEFORE_MEAL,
        "Enter glucose: <value> [date time] [@note], e.g. 5.8 2/1 9:05 @before breakfast",
    ),
    BTN_GLUCOSE_AFTER_MEAL: (
        PendingEntry.GLUCOSE_AFTER_MEAL,
        "Enter glucose: <value> [date time] [@note], e.g. 7.2 2/1 11:00 @after lunch",
    ),
    BTN_WEIGHT: (
        PendingEntry.WEIGHT,
        "Enter weight value (kg), for example: 78.4",
    ),
}

_pending_by_chat: dict[int, PendingEntry] = {}


def _data_dir() -> Path:
    return Path(settings.data_dir)


def _is_allowed(message: types.Message) -> bool:
    chat_id = message.chat.id
    if chat_id in settings.allowed_chat_ids:
        return True
    logger.debug("Ignoring message from chat_id={}", chat_id)
    return False


def build_menu_keyboard(medications: list[str]) -> ReplyKeyboardMarkup:
    rows = [
        [KeyboardButton(text=BTN_GLUCOSE_BEFORE_MEAL), KeyboardButton(text=BTN_GLUCOSE_AFTER_MEAL)],
        [KeyboardButton(text=BTN_WEIGHT), KeyboardButton(text=BTN_SHOW_MENU)],
    ]
    for idx in range(0, len(medications), 2):
        rows.append(
            [KeyboardButton(text=medication_button(name)) for name in medications[idx : idx + 2]]
        )
    return ReplyKeyboardMarkup(keyboard=rows, resize_keyboard=True)


def _menu_keyboard(chat_id: int) -> ReplyKeyboardMarkup:
    try:
        medications = load_medications(_data_dir(), chat_id)
    except OSError as exc:
        logger.error("Medication list read failed chat_id={} err={}", chat_id, exc)
        medications = []
    return build_menu_keyboard(medications)


async def _reply(message: types.Message, text: str) -> None:
    await message.answer(text, reply_markup=_menu_keyboard(message.chat.id))


async def _save_glucose(message: types.Message, tag: GlucoseTag, payload: str) -> bool:
    chat_id = message.chat.id
    try:
        entry = parse_glucose_entry(payload, tag, settings.timezone)
    except InvalidTimezone as exc:
        logger.error("GLUCOSE rejected chat_id={} timezone error: {}", chat_id, exc)
        await _reply(message, TIMEZONE_ERROR_TEXT)
        return False
    except (InvalidValue, InvalidDateTime) as exc:
        logger.info("GLUCOSE rejected chat_id={} payload={!r} err={}", chat_id, payload, exc)
        await _reply(message, str(exc))
        return False

    append_glucose(_data_dir(), chat_id, entry)
    logger.info(
        "GLUCOSE saved chat_id={} tag={} value={} ts={}",
        chat_id,
        entry.tag.value,
        entry.value,
        entry.timestamp.isoformat(),
    )
    return True


async def cmd_menu(message: types.Message) -> None:
    if not _is_allowed(message):
        return
    await _reply(message, MENU_TEXT)


async def cmd_help(message: types.Message) -> None:
    if not _is_allowed(message):
        return
    await _reply(message, HELP_TEXT)


async def cmd_add_glucose(message: types.Message) -> None:
    if not _is_allowed(message):
        return
    parsed = parse_glucose_command(message.text or "")
    if parsed is None:
        await _reply(message, GLUCOSE_USAGE_TEXT)
        return
    tag, payload = parsed
    if not payload:
        await _reply(message, GLUCOSE_USAGE_TEXT)
        return
    if await _save_glucose(message, tag, payload):
        await _reply(message, "Glucose entry saved ✅")


async def cmd_addmed(message: types.Message) -> None:
    if not _is_allowed(message):
        return
    name = parse_addmed_command(message.text or "")
    if not name:
        await _reply(message, ADDMED_USAGE_TEXT)
        return
    if add_medication(_data_dir(), message.chat.id, name):
        logger.info("MED added chat_id={} name={!r}", message.chat.id, name)
        await _reply(message, f"Medication added: {name}")
    else:
        await _reply(message, f"Medication already exists: {name}")


async def _handle_medication_button(message: types.Message, name: str) -> None:
    chat_id = message.chat.id
    known = find_medication(_data_dir(), chat_id, name)
    if known is None:
        await _reply(message, "Unknown medication. Use /addmed <name> first.")
        return
    append_medication_use(_data_dir(), chat_id, MedicationUse(name=known, timestamp=now_utc()))
    logger.info("MED usage saved chat_id={} name={!r}", chat_id, known)
    await _reply(message, f"Medication usage saved ✅ ({known})")


async def _handle_pending(message: types.Message, pending: PendingEntry, text: str) -> None:
    chat_id = message.chat.id
    if pending is PendingEntry.WEIGHT:
        try:
            entry = parse_weight_entry(text)
        except InvalidValue as exc:
            await _reply(message, str(exc))
            return
        append_weight(_data_dir(), chat_id, entry)
        logger.info("WEIGHT saved chat_id={} value={}", chat_id, entry.value_kg)
    elif not await _save_glucose(message, _PENDING_GLUCOSE_TAGS[pending], text):
        return

    _pending_by_chat.pop(chat_id, None)
    await _reply(message, "Saved ✅")


async def on_text(message: types.Message) -> None:
    if not _is_allowed(message):
        return
    text = (message.text or "").strip()
    if not text:
        return
    chat_id = message.chat.id

    if text == BTN_SHOW_MENU:
        await _reply(message, MENU_TEXT)
        return

    button = _PENDING_BUTTONS.get(text)
    if button is not None:
        pending, prompt = button
        _pending_by_chat[chat_id] = pending
        await _reply(message, prompt)
        return

    medication = parse_medication_button(text)
    if medication is not None:
        await _handle_medication_button(message, medication)
        return

    pending = _pending_by_chat.get(chat_id)
    if pending is not None:
        await _handle_pending(message, pending, text)
        return

    await _reply(message, FALLBACK_TEXT)


def setup_handlers(dispatcher: Dispatcher) -> None:
    dispatcher.message.register(cmd_menu, Command("start", "menu"))
    dispatcher.message.register(cmd_help, Command("help"))
    dispatcher.message.register(
        cmd_add_glucose,
        Command("addgb", "add_glucose_before", "addga", "add_glucose_after"),
    )
    dispatcher.message.register(cmd_addmed, Command("addmed", "add_medication"))
    dispatcher.message.register(on_text, F.text)


setup_handlers(dp)
