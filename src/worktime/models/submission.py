"""Typed intermediate forms of a submission between extraction and storage."""

from dataclasses import dataclass, fields
from typing import Any, Generic, List, Optional, TypeVar

from ..errors import ValidationError
from .working import ExtraInfo, Salary, YearMonth

T = TypeVar("T")


@dataclass
class SubmissionFields:
    """Whitelisted raw fields of a submission payload.

    Every string field holds a non-empty string or None; nothing is parsed
    yet. ``extra_info`` is kept as received and checked by validation.
    """

    # common data
    job_title: Optional[str] = None
    sector: Optional[str] = None
    gender: Optional[str] = None
    is_currently_employed: Optional[str] = None
    employment_type: Optional[str] = None
    status: Optional[str] = None
    campaign_name: Optional[str] = None
    about_this_job: Optional[str] = None
    email: Optional[str] = None
    company_id: Optional[str] = None
    company: Optional[str] = None
    job_ending_time_year: Optional[str] = None
    job_ending_time_month: Optional[str] = None
    # working time data
    week_work_time: Optional[str] = None
    overtime_frequency: Optional[str] = None
    day_promised_work_time: Optional[str] = None
    day_real_work_time: Optional[str] = None
    has_overtime_salary: Optional[str] = None
    is_overtime_salary_legal: Optional[str] = None
    has_compensatory_dayoff: Optional[str] = None
    # salary data
    salary_type: Optional[str] = None
    salary_amount: Optional[str] = None
    experience_in_year: Optional[str] = None
    # referral
    recommendation_string: Optional[str] = None
    # not a string field
    extra_info: Any = None

    @classmethod
    def string_field_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != "extra_info"]


WORKING_TIME_FIELDS = (
    "week_work_time",
    "overtime_frequency",
    "day_promised_work_time",
    "day_real_work_time",
    "has_overtime_salary",
    "is_overtime_salary_legal",
    "has_compensatory_dayoff",
)

SALARY_FIELDS = ("salary_type", "salary_amount", "experience_in_year")


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """Outcome of a parsing step: a value, or the first violated rule."""

    value: Optional[T] = None
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Parsed[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, message: str) -> "Parsed[T]":
        return cls(error=ValidationError(message))


@dataclass(frozen=True)
class CommonData:
    is_currently_employed: str
    job_title: str
    employment_type: str
    status: str
    company_id: Optional[str] = None
    company_query: Optional[str] = None
    job_ending_time: Optional[YearMonth] = None
    gender: Optional[str] = None
    email: Optional[str] = None
    extra_info: Optional[List[ExtraInfo]] = None


@dataclass(frozen=True)
class WorkingTimeData:
    week_work_time: float
    overtime_frequency: int
    day_promised_work_time: float
    day_real_work_time: float
    has_overtime_salary: Optional[str] = None
    is_overtime_salary_legal: Optional[str] = None
    has_compensatory_dayoff: Optional[str] = None


@dataclass(frozen=True)
class SalaryData:
    salary: Salary
    experience_in_year: int


@dataclass(frozen=True)
class ValidatedSubmission:
    """A submission whose every present group passed validation."""

    raw: SubmissionFields
    common: CommonData
    working_time: Optional[WorkingTimeData] = None
    salary: Optional[SalaryData] = None
