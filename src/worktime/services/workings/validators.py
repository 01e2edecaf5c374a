"""
Validation of a submission.

Each ``parse_*`` function walks its rules in a fixed order and returns a
``Parsed`` holding either the typed group or the first violated rule. No
rule is evaluated after a failure, and nothing is mutated: the typed
values come back in new dataclasses.
"""

import re
from datetime import datetime
from typing import Any, List, Optional

from ...models.submission import (
    SALARY_FIELDS,
    WORKING_TIME_FIELDS,
    CommonData,
    Parsed,
    SalaryData,
    SubmissionFields,
    ValidatedSubmission,
    WorkingTimeData,
)
from ...models.working import ExtraInfo, Salary, YearMonth

EMPLOYMENT_TYPES = (
    "full-time",
    "part-time",
    "intern",
    "temporary",
    "contract",
    "dispatched-labor",
)
GENDERS = ("male", "female", "other")
STATUSES = ("published", "hidden")
YES_NO_UNKNOWN = ("yes", "no", "don't know")
OVERTIME_FREQUENCIES = ("0", "1", "2", "3")
SALARY_TYPES = ("year", "month", "day", "hour")

JOB_ENDING_YEARS_BACK = 10
MAX_WEEK_WORK_TIME = 168
MAX_DAY_WORK_TIME = 24
MAX_SALARY_AMOUNT = 100_000_000
MAX_EXPERIENCE_IN_YEAR = 50

# plain decimal literals only, no "1_000", "+5", "1e3" or "nan"
INT_RE = re.compile(r"^-?[0-9]+\Z")
FLOAT_RE = re.compile(r"^-?[0-9]+(\.[0-9]+)?\Z")

# reference https://stackoverflow.com/a/46181/9332375
EMAIL_RE = re.compile(
    r'^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))@'
    r"((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$"
)


def to_int(value: str) -> Optional[int]:
    if not INT_RE.match(value):
        return None
    return int(value)


def to_float(value: str) -> Optional[float]:
    if not FLOAT_RE.match(value):
        return None
    return float(value)


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.match(email.lower()) is not None


def has_working_time_data(fields: SubmissionFields) -> bool:
    return any(getattr(fields, name) for name in WORKING_TIME_FIELDS)


def has_salary_data(fields: SubmissionFields) -> bool:
    return any(getattr(fields, name) for name in SALARY_FIELDS)


def _parse_job_ending_time(
    fields: SubmissionFields, now: datetime
) -> Parsed[YearMonth]:
    if not fields.job_ending_time_year:
        return Parsed.failure("job_ending_time_year is required")
    if not fields.job_ending_time_month:
        return Parsed.failure("job_ending_time_month is required")

    year = to_int(fields.job_ending_time_year)
    if year is None:
        return Parsed.failure("job_ending_time_year should be a number")
    if year <= now.year - JOB_ENDING_YEARS_BACK:
        return Parsed.failure(
            f"job_ending_time_year should be within {JOB_ENDING_YEARS_BACK} years"
        )

    month = to_int(fields.job_ending_time_month)
    if month is None:
        return Parsed.failure("job_ending_time_month should be a number")
    if month < 1 or month > 12:
        return Parsed.failure("job_ending_time_month should be between 1 and 12")

    if (year, month) > (now.year, now.month):
        return Parsed.failure("job ending time should not be later than now")

    return Parsed.success(YearMonth(year=year, month=month))


def _parse_extra_info(extra_info: Any) -> Parsed[List[ExtraInfo]]:
    if not isinstance(extra_info, list):
        return Parsed.failure("extra_info should be an array")
    if not all(
        isinstance(item, dict)
        and isinstance(item.get("key"), str)
        and isinstance(item.get("value"), str)
        for item in extra_info
    ):
        return Parsed.failure("extra_info items should be {key, value} strings")
    return Parsed.success(
        [ExtraInfo(key=item["key"], value=item["value"]) for item in extra_info]
    )


def parse_common(fields: SubmissionFields, now: datetime) -> Parsed[CommonData]:
    """Validate company, employment status, job and personal fields."""
    if not fields.company_id and not fields.company:
        return Parsed.failure("company or company_id is required")

    if not fields.is_currently_employed:
        return Parsed.failure("is_currently_employed is required")
    if fields.is_currently_employed not in ("yes", "no"):
        return Parsed.failure("is_currently_employed should be yes or no")

    job_ending_time = None
    if fields.is_currently_employed == "yes":
        if fields.job_ending_time_year or fields.job_ending_time_month:
            return Parsed.failure(
                "job_ending_time is meaningless when currently employed"
            )
    else:
        parsed = _parse_job_ending_time(fields, now)
        if not parsed.ok:
            return Parsed(error=parsed.error)
        job_ending_time = parsed.value

    if not fields.job_title:
        return Parsed.failure("job_title is required")

    if not fields.employment_type:
        return Parsed.failure("employment_type is required")
    if fields.employment_type not in EMPLOYMENT_TYPES:
        return Parsed.failure(
            "employment_type should be one of " + ", ".join(EMPLOYMENT_TYPES)
        )

    if fields.gender and fields.gender not in GENDERS:
        return Parsed.failure("gender should be male, female or other")

    extra_info = None
    if fields.extra_info:
        parsed = _parse_extra_info(fields.extra_info)
        if not parsed.ok:
            return Parsed(error=parsed.error)
        extra_info = parsed.value

    if fields.email and not is_valid_email(fields.email):
        return Parsed.failure("email is invalid")

    if fields.status and fields.status not in STATUSES:
        return Parsed.failure("status should be published or hidden")

    return Parsed.success(
        CommonData(
            is_currently_employed=fields.is_currently_employed,
            job_title=fields.job_title,
            employment_type=fields.employment_type,
            status=fields.status or "published",
            company_id=fields.company_id,
            company_query=fields.company,
            job_ending_time=job_ending_time,
            gender=fields.gender,
            email=fields.email,
            extra_info=extra_info,
        )
    )


def _parse_hours(value: Optional[str], name: str, upper: int) -> Parsed[float]:
    if not value:
        return Parsed.failure(f"{name} is required")
    hours = to_float(value)
    if hours is None:
        return Parsed.failure(f"{name} should be a number")
    if hours < 0 or hours > upper:
        return Parsed.failure(f"{name} should be between 0 and {upper}")
    return Parsed.success(hours)


def parse_working_time(fields: SubmissionFields) -> Parsed[WorkingTimeData]:
    """Validate the working-time group."""
    week_work_time = _parse_hours(
        fields.week_work_time, "week_work_time", MAX_WEEK_WORK_TIME
    )
    if not week_work_time.ok:
        return Parsed(error=week_work_time.error)

    if not fields.overtime_frequency:
        return Parsed.failure("overtime_frequency is required")
    if fields.overtime_frequency not in OVERTIME_FREQUENCIES:
        return Parsed.failure("overtime_frequency should be 0, 1, 2 or 3")

    day_promised_work_time = _parse_hours(
        fields.day_promised_work_time, "day_promised_work_time", MAX_DAY_WORK_TIME
    )
    if not day_promised_work_time.ok:
        return Parsed(error=day_promised_work_time.error)

    day_real_work_time = _parse_hours(
        fields.day_real_work_time, "day_real_work_time", MAX_DAY_WORK_TIME
    )
    if not day_real_work_time.ok:
        return Parsed(error=day_real_work_time.error)

    if fields.has_overtime_salary and fields.has_overtime_salary not in YES_NO_UNKNOWN:
        return Parsed.failure("has_overtime_salary should be yes, no or don't know")

    if fields.is_overtime_salary_legal:
        if fields.has_overtime_salary != "yes":
            return Parsed.failure(
                "is_overtime_salary_legal is only meaningful when has_overtime_salary is yes"
            )
        if fields.is_overtime_salary_legal not in YES_NO_UNKNOWN:
            return Parsed.failure(
                "is_overtime_salary_legal should be yes, no or don't know"
            )

    if (
        fields.has_compensatory_dayoff
        and fields.has_compensatory_dayoff not in YES_NO_UNKNOWN
    ):
        return Parsed.failure("has_compensatory_dayoff should be yes, no or don't know")

    return Parsed.success(
        WorkingTimeData(
            week_work_time=week_work_time.value,
            overtime_frequency=int(fields.overtime_frequency),
            day_promised_work_time=day_promised_work_time.value,
            day_real_work_time=day_real_work_time.value,
            has_overtime_salary=fields.has_overtime_salary,
            is_overtime_salary_legal=fields.is_overtime_salary_legal,
            has_compensatory_dayoff=fields.has_compensatory_dayoff,
        )
    )


def parse_salary(fields: SubmissionFields) -> Parsed[SalaryData]:
    """Validate the salary group."""
    if not fields.salary_type:
        return Parsed.failure("salary_type is required")
    if fields.salary_type not in SALARY_TYPES:
        return Parsed.failure("salary_type should be year, month, day or hour")

    if not fields.salary_amount:
        return Parsed.failure("salary_amount is required")
    amount = to_int(fields.salary_amount)
    if amount is None:
        return Parsed.failure("salary_amount should be an integer")
    if amount < 0:
        return Parsed.failure("salary_amount should not be less than 0")
    if amount > MAX_SALARY_AMOUNT:
        return Parsed.failure(
            f"salary_amount should not be greater than {MAX_SALARY_AMOUNT}"
        )

    if not fields.experience_in_year:
        return Parsed.failure("experience_in_year is required")
    experience = to_int(fields.experience_in_year)
    if experience is None:
        return Parsed.failure("experience_in_year should be an integer")
    if experience < 0 or experience > MAX_EXPERIENCE_IN_YEAR:
        return Parsed.failure(
            f"experience_in_year should be between 0 and {MAX_EXPERIENCE_IN_YEAR}"
        )

    return Parsed.success(
        SalaryData(
            salary=Salary(type=fields.salary_type, amount=amount),
            experience_in_year=experience,
        )
    )


def validate_submission(
    fields: SubmissionFields, now: datetime
) -> Parsed[ValidatedSubmission]:
    """Run the common, working-time and salary passes; first failure wins.

    The working-time and salary passes run only when their group has at
    least one field. A submission carrying neither group is rejected.
    """
    common = parse_common(fields, now)
    if not common.ok:
        return Parsed(error=common.error)

    working_time = None
    if has_working_time_data(fields):
        parsed = parse_working_time(fields)
        if not parsed.ok:
            return Parsed(error=parsed.error)
        working_time = parsed.value

    salary = None
    if has_salary_data(fields):
        parsed = parse_salary(fields)
        if not parsed.ok:
            return Parsed(error=parsed.error)
        salary = parsed.value

    if working_time is None and salary is None:
        return Parsed.failure("either salary or working time data is required")

    return Parsed.success(
        ValidatedSubmission(
            raw=fields, common=common.value, working_time=working_time, salary=salary
        )
    )
