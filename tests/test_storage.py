import csv
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from src.core.entries import GlucoseEntry, GlucoseTag, MedicationUse, WeightEntry
from src.storage.diary_repo import (
    GLUCOSE_HEADER,
    append_glucose,
    append_medication_use,
    append_weight,
)
from src.storage.medications_repo import (
    add_medication,
    find_medication,
    load_medications,
    medications_path,
)

TS = datetime(2024, 2, 1, 6, 5, tzinfo=timezone.utc)


def _read_rows(path: Path) -> list[list[str]]:
    with path.open(encoding="utf-8", newline="") as fh:
        return list(csv.reader(fh))


def test_glucose_rows_appended_with_single_header(tmp_path: Path) -> None:
    first = GlucoseEntry(value=Decimal("6.4"), timestamp=TS, tag=GlucoseTag.AFTER_MEAL, note='tea, "no sugar"')
    second = GlucoseEntry(value=Decimal("5.8"), timestamp=TS, tag=GlucoseTag.BEFORE_MEAL)

    path = append_glucose(tmp_path, 123, first)
    append_glucose(tmp_path, 123, second)

    assert path == tmp_path / "123" / "glucose.csv"
    rows = _read_rows(path)
    assert rows[0] == list(GLUCOSE_HEADER)
    assert rows[1] == ["2024-02-01T06:05:00+00:00", "123", "after_meal", "6.4", 'tea, "no sugar"']
    assert rows[2] == ["2024-02-01T06:05:00+00:00", "123", "before_meal", "5.8", ""]
    assert len(rows) == 3


def test_weight_and_medication_logs(tmp_path: Path) -> None:
    weight_path = append_weight(tmp_path, 7, WeightEntry(value_kg=Decimal("78.4"), timestamp=TS))
    med_path = append_medication_use(tmp_path, 7, MedicationUse(name="Metformin 500", timestamp=TS))

    assert _read_rows(weight_path) == [
        ["timestamp", "chat_id", "value_kg"],
        ["2024-02-01T06:05:00+00:00", "7", "78.4"],
    ]
    assert _read_rows(med_path) == [
        ["timestamp", "chat_id", "medication"],
        ["2024-02-01T06:05:00+00:00", "7", "Metformin 500"],
    ]


def test_exponent_values_written_plain(tmp_path: Path) -> None:
    path = append_weight(tmp_path, 1, WeightEntry(value_kg=Decimal("1E+2"), timestamp=TS))
    assert _read_rows(path)[1][2] == "100"


def test_add_medication_normalizes_and_dedupes(tmp_path: Path) -> None:
    assert add_medication(tmp_path, 5, "  Metformin   500 ") is True
    assert add_medication(tmp_path, 5, "metformin 500") is False
    assert add_medication(tmp_path, 5, "   ") is False
    assert add_medication(tmp_path, 5, "Aspirin") is True

    assert load_medications(tmp_path, 5) == ["Metformin 500", "Aspirin"]
    assert find_medication(tmp_path, 5, "METFORMIN  500") == "Metformin 500"
    assert find_medication(tmp_path, 5, "Insulin") is None
    assert load_medications(tmp_path, 6) == []


def test_load_medications_skips_blank_and_duplicate_lines(tmp_path: Path) -> None:
    path = medications_path(tmp_path, 9)
    path.parent.mkdir(parents=True)
    path.write_text("Aspirin\n\n  aspirin \nVitamin  D\n", encoding="utf-8")
    assert load_medications(tmp_path, 9) == ["Aspirin", "Vitamin D"]
