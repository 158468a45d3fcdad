"""
University record schema.

Records are loaded once from data/universities.json and never mutated, so
every model is frozen. JSON keys are camelCase (countryFull,
tuitionAnnualUSD, ...); attributes are snake_case and populated by alias.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DegreeLevel = Literal["Bachelor", "Master", "PhD"]
DEGREE_LEVELS: tuple[str, ...] = ("Bachelor", "Master", "PhD")


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class AlumniCase(_Record):
    title: str
    summary: str
    link: str = ""


class Deadline(_Record):
    level: str
    term: str
    round_name: str = Field(..., alias="roundName")
    deadline_date: str | None = Field(None, alias="deadlineDate")  # ISO date
    notes: str = ""
    link: str = ""


class LevelRequirements(_Record):
    gpa: str
    standardized_tests: str = Field(..., alias="standardizedTests")
    english_proficiency: str = Field(..., alias="englishProficiency")
    additional_requirements: str = Field(..., alias="additionalRequirements")
    application_deadline: str = Field(..., alias="applicationDeadline")


class AdmissionRequirements(_Record):
    bachelor: LevelRequirements
    master: LevelRequirements


class University(_Record):
    id: str = Field(..., min_length=1)
    slug: str = Field(..., pattern=r"^[A-Za-z0-9_-]+$")
    name: str
    country: str
    country_full: str = Field(..., alias="countryFull")
    city: str
    founded: int | None = None
    rating: int = Field(..., gt=0)
    tuition_annual: float = Field(..., ge=0, alias="tuitionAnnual")
    tuition_annual_usd: float = Field(..., ge=0, alias="tuitionAnnualUSD")
    currency: str
    has_grant: bool = Field(..., alias="hasGrant")
    languages: list[str] = []
    degree_levels: list[DegreeLevel] = Field(..., min_length=1, alias="degreeLevels")
    majors: list[str] = []
    strong_majors: list[str] = Field([], alias="strongMajors")
    summary: str = ""
    tagline: str = ""
    website: str = ""
    logo: str = ""
    employment_rate: float | None = Field(None, alias="employmentRate")
    international_students_percent: float = Field(..., ge=0, alias="internationalStudentsPercent")
    cases: list[AlumniCase] = []
    deadlines: list[Deadline] = []
    admission_requirements: AdmissionRequirements = Field(..., alias="admissionRequirements")

    def to_json(self) -> dict:
        """Serialise with the camelCase keys the frontend expects."""
        return self.model_dump(mode="json", by_alias=True)
