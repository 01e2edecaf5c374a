"""
Data models for the worktime submission pipeline.
"""

from .submission import (
    CommonData,
    Parsed,
    SalaryData,
    SubmissionFields,
    ValidatedSubmission,
    WorkingTimeData,
)
from .user import AuthUser, UserRef
from .working import Archive, Author, Company, ExtraInfo, Salary, Working, YearMonth

__all__ = [
    "Archive",
    "AuthUser",
    "Author",
    "CommonData",
    "Company",
    "ExtraInfo",
    "Parsed",
    "Salary",
    "SalaryData",
    "SubmissionFields",
    "UserRef",
    "ValidatedSubmission",
    "Working",
    "WorkingTimeData",
    "YearMonth",
]
