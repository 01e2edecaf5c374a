"""Pydantic models for a persisted salary/working-time record."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field

from .user import UserRef

SalaryType = Literal["hour", "day", "month", "year"]


class Author(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    email: Optional[str] = None

    @property
    def ref(self) -> UserRef:
        return UserRef(id=self.id, type=self.type)


class Company(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None


class Salary(BaseModel):
    type: SalaryType
    amount: int


class YearMonth(BaseModel):
    year: int
    month: int


class Archive(BaseModel):
    is_archived: bool = False
    reason: str = ""


class ExtraInfo(BaseModel):
    key: str
    value: str


class Working(BaseModel):
    """A salary/working-time submission.

    Optional fields that were not given or could not be derived stay None
    and are left out of the stored document entirely.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    author: Author
    company: Company
    created_at: datetime

    # common data
    job_title: str
    is_currently_employed: Literal["yes", "no"]
    employment_type: str
    status: str = "published"
    sector: Optional[str] = None
    gender: Optional[str] = None
    campaign_name: Optional[str] = None
    about_this_job: Optional[str] = None
    extra_info: Optional[List[ExtraInfo]] = None
    job_ending_time: Optional[YearMonth] = None
    data_time: YearMonth

    # working time data
    week_work_time: Optional[float] = None
    overtime_frequency: Optional[int] = None
    day_promised_work_time: Optional[float] = None
    day_real_work_time: Optional[float] = None
    has_overtime_salary: Optional[str] = None
    is_overtime_salary_legal: Optional[str] = None
    has_compensatory_dayoff: Optional[str] = None

    # salary data
    salary: Optional[Salary] = None
    experience_in_year: Optional[int] = None
    estimated_hourly_wage: Optional[float] = None
    estimated_monthly_wage: Optional[float] = None

    recommended_by: Optional[Union[UserRef, str]] = None
    archive: Archive = Field(default_factory=Archive)

    def to_document(self) -> Dict[str, Any]:
        """Serialize for storage, dropping every unset optional field."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_response(self) -> Dict[str, Any]:
        """Serialize for the client; recommended_by is stored but never echoed."""
        document = self.to_document()
        document.pop("recommended_by", None)
        return document
