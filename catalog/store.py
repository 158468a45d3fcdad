"""
In-memory catalog of universities.

The bundled snapshot is read and validated once at startup; afterwards the
store only answers read queries, so it can be shared across requests without
locking.

Public API:
    CatalogStore.load(path)      → CatalogStore  (raises CatalogLoadError)
    CatalogStore.list_all()      → list[University]
    CatalogStore.get_by_slug(s)  → University | None
    CatalogStore.search(q)       → list[University]  (≤ SEARCH_LIMIT)
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from catalog.models import University

DATA_DIR  = Path(__file__).parent.parent / "data"
DATA_FILE = DATA_DIR / "universities.json"

# Suggestions are returned in catalog order, not by relevance.
SEARCH_LIMIT = 10

log = logging.getLogger(__name__)

_records = TypeAdapter(list[University])


class CatalogLoadError(Exception):
    """The snapshot is missing, malformed or violates a uniqueness rule."""


def matches_text(university: University, query: str) -> bool:
    """Case-insensitive substring match against name, city or country."""
    term = query.lower()
    return (
        term in university.name.lower()
        or term in university.city.lower()
        or term in university.country_full.lower()
    )


class CatalogStore:
    def __init__(self, universities: Iterable[University]):
        self._universities = tuple(universities)
        self._by_slug: dict[str, University] = {}
        seen_ids: set[str] = set()

        for u in self._universities:
            if u.id in seen_ids:
                raise CatalogLoadError(f"Duplicate university id: {u.id!r}")
            if u.slug in self._by_slug:
                raise CatalogLoadError(f"Duplicate university slug: {u.slug!r}")
            seen_ids.add(u.id)
            self._by_slug[u.slug] = u

    def __len__(self) -> int:
        return len(self._universities)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_all(self) -> list[University]:
        return list(self._universities)

    def get_by_slug(self, slug: str) -> University | None:
        return self._by_slug.get(slug)

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> list[University]:
        """
        Return up to `limit` universities whose name, city or country contains
        `query`. A blank query returns nothing rather than the whole catalog.
        """
        if not query or not query.strip() or limit <= 0:
            return []

        results = []
        for u in self._universities:
            if matches_text(u, query):
                results.append(u)
                if len(results) >= limit:
                    break
        return results

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_records(cls, records: list[dict]) -> "CatalogStore":
        try:
            universities = _records.validate_python(records)
        except ValidationError as exc:
            raise CatalogLoadError(f"Invalid university record: {exc}") from exc
        return cls(universities)

    @classmethod
    def load(cls, path: Path = DATA_FILE) -> "CatalogStore":
        """Read the snapshot; accepts {"universities": [...]} or a bare list."""
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogLoadError(f"Cannot read {path}: {exc}") from exc

        records = raw.get("universities") if isinstance(raw, dict) else raw
        if not isinstance(records, list):
            raise CatalogLoadError(f"{path.name} has no university list")

        store = cls.from_records(records)
        log.info("Loaded %d universities from %s", len(store), path.name)
        return store
