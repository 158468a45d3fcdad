import json

import pytest

from frontend.comparison import (
    MAX_ENTRIES,
    STORAGE_KEY,
    AddOutcome,
    ComparisonSet,
    LocalStorage,
    best_values,
)


def uni(i, **fields):
    return {"id": str(i), "name": f"Uni {i}", **fields}


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "local_storage.json")


@pytest.fixture
def comparison(storage):
    return ComparisonSet(storage)


class TestAdd:
    """Test ComparisonSet.add()."""

    def test_add_appends_and_persists(self, comparison, storage):
        notice = comparison.add(uni(1))
        assert notice.outcome is AddOutcome.ADDED
        assert "Uni 1" in notice.description
        assert json.loads(storage.get_item(STORAGE_KEY)) == [uni(1)]

    def test_duplicate_rejected(self, comparison):
        comparison.add(uni(1))
        notice = comparison.add(uni(1, name="Renamed"))
        assert notice.outcome is AddOutcome.DUPLICATE
        assert notice.title == "Already in comparison"
        assert len(comparison) == 1

    def test_cap_enforced(self, comparison):
        for i in range(MAX_ENTRIES):
            assert comparison.add(uni(i)).outcome is AddOutcome.ADDED
        notice = comparison.add(uni(99))
        assert notice.outcome is AddOutcome.FULL
        assert notice.title == "Comparison limit reached"
        assert len(comparison) == MAX_ENTRIES
        assert 99 not in comparison and "99" not in comparison

    def test_order_preserved(self, comparison):
        for i in (3, 1, 2):
            comparison.add(uni(i))
        assert [u["id"] for u in comparison.entries] == ["3", "1", "2"]


class TestRemoveAndClear:
    def test_remove_by_id(self, comparison, storage):
        comparison.add(uni(1))
        comparison.add(uni(2))
        comparison.remove("1")
        assert [u["id"] for u in comparison.entries] == ["2"]
        assert json.loads(storage.get_item(STORAGE_KEY)) == [uni(2)]

    def test_remove_missing_is_noop(self, comparison):
        comparison.add(uni(1))
        comparison.remove("42")
        assert [u["id"] for u in comparison.entries] == ["1"]

    def test_clear_drops_storage_key(self, comparison, storage):
        comparison.add(uni(1))
        comparison.clear()
        assert len(comparison) == 0
        assert storage.get_item(STORAGE_KEY) is None


class TestPersistence:
    """The set survives a reload from the same storage."""

    def test_hydrates_from_storage(self, comparison, storage):
        comparison.add(uni(1))
        comparison.add(uni(2))
        reloaded = ComparisonSet(storage)
        assert [u["id"] for u in reloaded.entries] == ["1", "2"]

    def test_other_keys_untouched(self, comparison, storage):
        storage.set_item("theme", "dark")
        comparison.add(uni(1))
        comparison.clear()
        assert storage.get_item("theme") == "dark"

    def test_corrupt_value_hydrates_empty(self, storage):
        storage.set_item(STORAGE_KEY, "{broken")
        assert len(ComparisonSet(storage)) == 0

    def test_corrupt_file_hydrates_empty(self, storage):
        storage.path.write_text("not json", encoding="utf-8")
        assert len(ComparisonSet(storage)) == 0

    def test_stored_duplicates_and_overflow_dropped(self, storage):
        stored = [uni(1), uni(1), uni(2), uni(3), uni(4), uni(5)]
        storage.set_item(STORAGE_KEY, json.dumps(stored))
        assert [u["id"] for u in ComparisonSet(storage).entries] == ["1", "2", "3", "4"]


class TestBestValues:
    def test_picks_best_per_metric(self):
        entries = [
            uni(1, rating=3, tuitionAnnualUSD=58000, internationalStudentsPercent=20),
            uni(2, rating=1, tuitionAnnualUSD=59750, internationalStudentsPercent=33),
            uni(3, rating=7, tuitionAnnualUSD=1650, internationalStudentsPercent=41),
        ]
        assert best_values(entries) == {
            "rating": 1,
            "tuitionAnnualUSD": 1650,
            "internationalStudentsPercent": 41,
        }

    def test_empty_set(self):
        assert best_values([]) == {
            "rating": None,
            "tuitionAnnualUSD": None,
            "internationalStudentsPercent": None,
        }
