"""
Side-by-side comparison list.

Holds up to MAX_ENTRIES university snapshots, de-duplicated by id, and
re-persists the whole list on every change under a fixed storage key. The
storage is a small JSON key/value file standing in for browser local storage;
it is not coordinated between processes.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

STORAGE_KEY = "comparison"
MAX_ENTRIES = 4

University = dict[str, Any]


class LocalStorage:
    """String values under string keys, persisted to one JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            log.warning("Storage file %s is corrupt; starting empty.", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


class AddOutcome(str, Enum):
    ADDED = "added"
    DUPLICATE = "duplicate"
    FULL = "full"


@dataclass(frozen=True)
class Notice:
    outcome: AddOutcome
    title: str
    description: str


class ComparisonSet:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self._entries: list[University] = self._hydrate()

    def _hydrate(self) -> list[University]:
        stored = self.storage.get_item(STORAGE_KEY)
        if not stored:
            return []
        try:
            entries = json.loads(stored)
        except json.JSONDecodeError:
            log.warning("Stored comparison list is not valid JSON; ignoring it.")
            return []
        if not isinstance(entries, list):
            return []

        # Storage may have been edited by hand or by another process.
        result: list[University] = []
        for u in entries:
            if isinstance(u, dict) and "id" in u and all(u["id"] != r["id"] for r in result):
                result.append(u)
        return result[:MAX_ENTRIES]

    def _persist(self) -> None:
        self.storage.set_item(STORAGE_KEY, json.dumps(self._entries, ensure_ascii=False))

    @property
    def entries(self) -> list[University]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, university_id: object) -> bool:
        return any(u["id"] == university_id for u in self._entries)

    def add(self, university: University) -> Notice:
        if university["id"] in self:
            return Notice(
                AddOutcome.DUPLICATE,
                "Already in comparison",
                "This university is already added to your comparison list.",
            )
        if len(self._entries) >= MAX_ENTRIES:
            return Notice(
                AddOutcome.FULL,
                "Comparison limit reached",
                f"You can compare up to {MAX_ENTRIES} universities at a time.",
            )

        self._entries.append(university)
        self._persist()
        return Notice(
            AddOutcome.ADDED,
            "Added to comparison",
            f"{university.get('name', 'University')} has been added to your comparison list.",
        )

    def remove(self, university_id: str) -> None:
        if university_id not in self:
            return
        self._entries = [u for u in self._entries if u["id"] != university_id]
        self._persist()

    def clear(self) -> None:
        self._entries = []
        self.storage.remove_item(STORAGE_KEY)


def _best(entries: list[University], field: str, lower_is_better: bool) -> float | None:
    values = [
        u[field] for u in entries
        if isinstance(u.get(field), (int, float)) and not isinstance(u.get(field), bool)
    ]
    if not values:
        return None
    return min(values) if lower_is_better else max(values)


def best_values(entries: list[University]) -> dict[str, float | None]:
    """Value to highlight per compared metric (keys are the JSON field names)."""
    return {
        "rating": _best(entries, "rating", lower_is_better=True),
        "tuitionAnnualUSD": _best(entries, "tuitionAnnualUSD", lower_is_better=True),
        "internationalStudentsPercent": _best(entries, "internationalStudentsPercent", lower_is_better=False),
    }
