from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence

from loguru import logger

from src.core.entries import GlucoseEntry, MedicationUse, WeightEntry

GLUCOSE_FILE = "glucose.csv"
WEIGHT_FILE = "weight.csv"
MEDICATION_LOG_FILE = "medication_log.csv"

GLUCOSE_HEADER = ("timestamp", "chat_id", "tag", "value_mmol_l", "note")
WEIGHT_HEADER = ("timestamp", "chat_id", "value_kg")
MEDICATION_LOG_HEADER = ("timestamp", "chat_id", "medication")


def user_data_dir(data_dir: Path, chat_id: int) -> Path:
    return Path(data_dir) / str(chat_id)


def _append_row(path: Path, header: Sequence[str], row: Sequence[object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    is_new = not path.exists()
    with path.open("a", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh)
        if is_new:
            writer.writerow(header)
        writer.writerow(row)


def append_glucose(data_dir: Path, chat_id: int, entry: GlucoseEntry) -> Path:
    path = user_data_dir(data_dir, chat_id) / GLUCOSE_FILE
    _append_row(
        path,
        GLUCOSE_HEADER,
        (
            entry.timestamp.isoformat(),
            chat_id,
            entry.tag.value,
            format(entry.value, "f"),
            entry.note or "",
        ),
    )
    logger.debug("glucose row appended path={} tag={}", path, entry.tag.value)
    return path


def append_weight(data_dir: Path, chat_id: int, entry: WeightEntry) -> Path:
    path = user_data_dir(data_dir, chat_id) / WEIGHT_FILE
    _append_row(
        path,
        WEIGHT_HEADER,
        (entry.timestamp.isoformat(), chat_id, format(entry.value_kg, "f")),
    )
    logger.debug("weight row appended path={}", path)
    return path


def append_medication_use(data_dir: Path, chat_id: int, entry: MedicationUse) -> Path:
    path = user_data_dir(data_dir, chat_id) / MEDICATION_LOG_FILE
    _append_row(
        path,
        MEDICATION_LOG_HEADER,
        (entry.timestamp.isoformat(), chat_id, entry.name),
    )
    logger.debug("medication use appended path={} name={}", path, entry.name)
    return path
