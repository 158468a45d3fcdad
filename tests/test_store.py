import json

import pytest

from catalog.models import University
from catalog.store import DATA_FILE, SEARCH_LIMIT, CatalogLoadError, CatalogStore


@pytest.fixture
def store(mit, stanford, toronto):
    return CatalogStore([mit, stanford, toronto])


class TestListAll:
    """Test CatalogStore.list_all()."""

    def test_preserves_insertion_order(self, store):
        """Records come back in the order they were loaded."""
        assert [u.slug for u in store.list_all()] == ["mit", "stanford", "toronto"]

    def test_returns_a_copy(self, store):
        """Mutating the returned list does not touch the catalog."""
        store.list_all().clear()
        assert len(store) == 3


class TestGetBySlug:
    """Test CatalogStore.get_by_slug()."""

    def test_every_slug_resolves_to_itself(self, store):
        for u in store.list_all():
            assert store.get_by_slug(u.slug).slug == u.slug

    def test_unknown_slug_is_none(self, store):
        assert store.get_by_slug("harvard") is None

    def test_match_is_case_sensitive(self, store):
        assert store.get_by_slug("MIT") is None


class TestSearch:
    """Test CatalogStore.search()."""

    def test_blank_query_returns_nothing(self, store):
        """An empty query is not 'match everything'."""
        assert store.search("") == []
        assert store.search("   ") == []

    def test_matches_name_case_insensitively(self, store):
        assert [u.slug for u in store.search("STANFORD")] == ["stanford"]

    def test_matches_city(self, store):
        assert [u.slug for u in store.search("cambridge")] == ["mit"]

    def test_matches_country(self, store):
        assert [u.slug for u in store.search("canada")] == ["toronto"]

    def test_results_in_catalog_order(self, store):
        assert [u.slug for u in store.search("united states")] == ["mit", "stanford"]

    def test_results_are_capped(self, make_university):
        many = CatalogStore(
            make_university(id=str(i), slug=f"uni-{i}", name=f"Uni {i}") for i in range(25)
        )
        results = many.search("uni")
        assert len(results) == SEARCH_LIMIT
        assert [u.id for u in results] == [str(i) for i in range(SEARCH_LIMIT)]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_returns_nothing(self, store, limit):
        assert store.search("united states", limit=limit) == []

    def test_explicit_limit(self, store):
        assert [u.slug for u in store.search("united states", limit=1)] == ["mit"]

    def test_every_result_contains_query(self, store):
        for u in store.search("an"):
            assert any("an" in f.lower() for f in (u.name, u.city, u.country_full))


class TestLoading:
    """Test snapshot loading and validation."""

    def test_duplicate_id_rejected(self, make_university):
        with pytest.raises(CatalogLoadError, match="id"):
            CatalogStore([make_university(id="1", slug="a"), make_university(id="1", slug="b")])

    def test_duplicate_slug_rejected(self, make_university):
        with pytest.raises(CatalogLoadError, match="slug"):
            CatalogStore([make_university(id="1", slug="a"), make_university(id="2", slug="a")])

    def test_negative_tuition_rejected(self, make_record):
        with pytest.raises(CatalogLoadError):
            CatalogStore.from_records([make_record(tuitionAnnualUSD=-1)])

    def test_non_positive_rating_rejected(self, make_record):
        with pytest.raises(CatalogLoadError):
            CatalogStore.from_records([make_record(rating=0)])

    def test_unknown_degree_level_rejected(self, make_record):
        with pytest.raises(CatalogLoadError):
            CatalogStore.from_records([make_record(degreeLevels=["Diploma"])])

    def test_empty_degree_levels_rejected(self, make_record):
        with pytest.raises(CatalogLoadError):
            CatalogStore.from_records([make_record(degreeLevels=[])])

    def test_load_wrapped_file(self, make_record, tmp_path):
        path = tmp_path / "universities.json"
        path.write_text(json.dumps({"universities": [make_record()]}), encoding="utf-8")
        assert len(CatalogStore.load(path)) == 1

    def test_load_bare_list(self, make_record, tmp_path):
        path = tmp_path / "universities.json"
        path.write_text(json.dumps([make_record()]), encoding="utf-8")
        assert len(CatalogStore.load(path)) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError):
            CatalogStore.load(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "universities.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            CatalogStore.load(path)

    def test_bundled_snapshot_loads(self):
        """The shipped data file is valid."""
        store = CatalogStore.load(DATA_FILE)
        assert len(store) > 0
        assert all(isinstance(u, University) for u in store.list_all())


class TestRecordsAreReadOnly:
    def test_university_is_frozen(self, mit):
        with pytest.raises(Exception):
            mit.rating = 99

    def test_json_uses_camel_case(self, mit):
        data = mit.to_json()
        assert data["countryFull"] == "United States"
        assert data["tuitionAnnualUSD"] == 55000
        assert data["hasGrant"] is True
        assert data["admissionRequirements"]["bachelor"]["standardizedTests"] == "SAT"
