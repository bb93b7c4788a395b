from __future__ import annotations

from pathlib import Path

from src.storage.diary_repo import user_data_dir

MEDICATIONS_FILE = "medications.txt"


def normalize_medication_name(name: str) -> str:
    return " ".join((name or "").split())


def medications_path(data_dir: Path, chat_id: int) -> Path:
    return user_data_dir(data_dir, chat_id) / MEDICATIONS_FILE


def load_medications(data_dir: Path, chat_id: int) -> list[str]:
    path = medications_path(data_dir, chat_id)
    if not path.exists():
        return []

    result: list[str] = []
    seen: set[str] = set()
    for line in path.read_text(encoding="utf-8").splitlines():
        name = normalize_medication_name(line)
        if not name or name.casefold() in seen:
            continue
        seen.add(name.casefold())
        result.append(name)
    return result


def find_medication(data_dir: Path, chat_id: int, name: str) -> str | None:
    wanted = normalize_medication_name(name).casefold()
    if not wanted:
        return None
    for existing in load_medications(data_dir, chat_id):
        if existing.casefold() == wanted:
            return existing
    return None


def add_medication(data_dir: Path, chat_id: int, name: str) -> bool:
    """Append ``name`` to the chat's medication list.

    Returns False for blank names and for names already present
    (case-insensitive).
    """
    normalized = normalize_medication_name(name)
    if not normalized:
        return False
    if find_medication(data_dir, chat_id, normalized) is not None:
        return False

    path = medications_path(data_dir, chat_id)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fh.write(f"{normalized}\n")
    return True
