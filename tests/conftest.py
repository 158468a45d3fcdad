import pytest

from catalog.models import University

_REQUIREMENTS = {
    "gpa": "3.5",
    "standardizedTests": "SAT",
    "englishProficiency": "TOEFL 100",
    "additionalRequirements": "",
    "applicationDeadline": "January 1",
}


def _record(**overrides) -> dict:
    """A complete university record in its JSON (camelCase) form."""
    record = {
        "id": "0",
        "slug": "sample-university",
        "name": "Sample University",
        "country": "US",
        "countryFull": "United States",
        "city": "Springfield",
        "founded": 1900,
        "rating": 50,
        "tuitionAnnual": 30000,
        "tuitionAnnualUSD": 30000,
        "currency": "USD",
        "hasGrant": False,
        "languages": ["English"],
        "degreeLevels": ["Bachelor"],
        "majors": ["CS"],
        "strongMajors": [],
        "summary": "",
        "tagline": "",
        "website": "",
        "logo": "",
        "employmentRate": None,
        "internationalStudentsPercent": 10,
        "cases": [],
        "deadlines": [],
        "admissionRequirements": {"bachelor": _REQUIREMENTS, "master": _REQUIREMENTS},
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_record():
    """Factory for raw JSON records."""
    return _record


@pytest.fixture
def make_university():
    """Factory for validated University models."""
    return lambda **overrides: University.model_validate(_record(**overrides))


@pytest.fixture
def mit(make_university):
    return make_university(
        id="1", slug="mit", name="Massachusetts Institute of Technology", city="Cambridge",
        rating=1, tuitionAnnualUSD=55000, hasGrant=True,
        internationalStudentsPercent=25, strongMajors=["CS", "EE"],
        degreeLevels=["Bachelor", "Master", "PhD"],
    )


@pytest.fixture
def stanford(make_university):
    return make_university(
        id="2", slug="stanford", name="Stanford University", city="Stanford",
        rating=3, tuitionAnnualUSD=58000, hasGrant=False,
        internationalStudentsPercent=20, strongMajors=["CS"],
        degreeLevels=["Bachelor", "Master"],
    )


@pytest.fixture
def toronto(make_university):
    return make_university(
        id="3", slug="toronto", name="University of Toronto", city="Toronto",
        country="CA", countryFull="Canada",
        rating=25, tuitionAnnualUSD=45300, hasGrant=True,
        internationalStudentsPercent=27, strongMajors=["Medicine"],
        degreeLevels=["PhD"],
    )
