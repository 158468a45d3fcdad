"""
Filter / sort / score engine behind the search page.

Pure functions over a list of University records: nothing here does I/O or
keeps state between calls.

Filters are applied in a fixed order (free text, country, tuition range,
degree level, strong major, scholarship) and every empty axis is skipped.
Sorting is stable, so ties keep catalog order.

The "best fit" ordering uses a fixed composite score:
    max(0, 100 - rating) * 2
  + max(0, (100000 - tuitionAnnualUSD) / 1000)
  + 30 if hasGrant
  + internationalStudentsPercent
  + 5 * len(strongMajors)

Public API:
    apply(universities, query, filters, sort) → list[University]
    best_fit_score(university)                → float
"""

from enum import Enum

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from catalog.models import University
from catalog.store import matches_text

DEFAULT_TUITION_RANGE: tuple[float, float] = (0, 100000)

GRANT_BONUS = 30
STRONG_MAJOR_WEIGHT = 5


class SortOption(str, Enum):
    RANKING = "ranking"
    TUITION_LOW = "tuition-low"
    TUITION_HIGH = "tuition-high"
    INTL_STUDENTS = "intl-students"
    BEST_FIT = "best-fit"


class FilterOptions(BaseModel):
    """Structured filters; an empty or missing field places no restriction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    countries: list[str] = []
    tuition_range: tuple[float, float] | None = Field(None, alias="tuitionRange")
    degree_levels: list[str] = Field([], alias="degreeLevels")
    majors: list[str] = []
    has_grant: bool = Field(False, alias="hasGrant")

    def is_active(self) -> bool:
        return bool(
            self.countries
            or self.degree_levels
            or self.majors
            or self.has_grant
            or (self.tuition_range is not None and tuple(self.tuition_range) != DEFAULT_TUITION_RANGE)
        )


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def best_fit_score(u: University) -> float:
    rank_score    = max(0, 100 - u.rating) * 2
    tuition_score = max(0, (100000 - u.tuition_annual_usd) / 1000)
    grant_score   = GRANT_BONUS if u.has_grant else 0
    major_score   = len(u.strong_majors) * STRONG_MAJOR_WEIGHT
    return rank_score + tuition_score + grant_score + u.international_students_percent + major_score


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def filter_universities(
    universities: list[University],
    query: str = "",
    filters: FilterOptions | None = None,
) -> list[University]:
    result = list(universities)
    filters = filters or FilterOptions()

    if query:
        result = [u for u in result if matches_text(u, query)]

    if filters.countries:
        allowed = set(filters.countries)
        result = [u for u in result if u.country_full in allowed]

    if filters.tuition_range is not None:
        lo, hi = filters.tuition_range
        result = [u for u in result if lo <= u.tuition_annual_usd <= hi]

    if filters.degree_levels:
        result = [u for u in result if any(lvl in u.degree_levels for lvl in filters.degree_levels)]

    if filters.majors:
        result = [u for u in result if any(m in u.strong_majors for m in filters.majors)]

    if filters.has_grant:
        result = [u for u in result if u.has_grant]

    return result


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

def _sort_keys(universities: list[University], sort: SortOption) -> np.ndarray:
    """Keys such that ascending order is the desired display order."""
    if sort is SortOption.RANKING:
        keys = [u.rating for u in universities]
    elif sort is SortOption.TUITION_LOW:
        keys = [u.tuition_annual_usd for u in universities]
    elif sort is SortOption.TUITION_HIGH:
        keys = [-u.tuition_annual_usd for u in universities]
    elif sort is SortOption.INTL_STUDENTS:
        keys = [-u.international_students_percent for u in universities]
    else:
        keys = [-best_fit_score(u) for u in universities]
    return np.asarray(keys, dtype=np.float64)


def sort_universities(
    universities: list[University],
    sort: SortOption | str = SortOption.RANKING,
) -> list[University]:
    if not universities:
        return []
    order = np.argsort(_sort_keys(universities, SortOption(sort)), kind="stable")
    return [universities[i] for i in order]


def apply(
    universities: list[University],
    query: str = "",
    filters: FilterOptions | None = None,
    sort: SortOption | str = SortOption.RANKING,
) -> list[University]:
    """Filter then sort: the ordered subset the search page displays."""
    return sort_universities(filter_universities(universities, query, filters), sort)


# ---------------------------------------------------------------------------
# Facets
# ---------------------------------------------------------------------------

def available_countries(universities: list[University]) -> list[str]:
    return sorted({u.country_full for u in universities})


def available_majors(universities: list[University]) -> list[str]:
    return sorted({m for u in universities for m in u.strong_majors})
