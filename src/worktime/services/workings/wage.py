"""
Estimated wages derived from a salary and the reported working time.

A year is modelled as 52 working weeks of ``week_work_time`` hours, less
the public holidays and annual leave days, each of which would have been
a ``day_real_work_time``-hour day.
"""

from dataclasses import dataclass
from typing import Optional

from ...config import settings
from ...models.working import Salary

WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class WagePolicy:
    public_holidays: int = 12
    annual_leave_days: int = 7

    @classmethod
    def from_settings(cls) -> "WagePolicy":
        return cls(
            public_holidays=settings.public_holidays_per_year,
            annual_leave_days=settings.annual_leave_days,
        )

    @property
    def days_off(self) -> int:
        return self.public_holidays + self.annual_leave_days

    def yearly_work_hours(self, week_work_time: float, day_real_work_time: float) -> float:
        return WEEKS_PER_YEAR * week_work_time - self.days_off * day_real_work_time


DEFAULT_POLICY = WagePolicy()


def estimated_hourly_wage(
    salary: Salary,
    day_real_work_time: Optional[float] = None,
    week_work_time: Optional[float] = None,
    policy: WagePolicy = DEFAULT_POLICY,
) -> Optional[float]:
    """Hourly wage implied by ``salary``, or None when it cannot be derived.

    Hour salaries need no working time; day salaries need the real daily
    hours; month and year salaries need both daily and weekly hours.
    """
    if salary.type == "hour":
        return float(salary.amount)

    if salary.type == "day":
        if not day_real_work_time:
            return None
        return salary.amount / day_real_work_time

    if not day_real_work_time or not week_work_time:
        return None
    yearly_hours = policy.yearly_work_hours(week_work_time, day_real_work_time)
    if yearly_hours <= 0:
        return None
    yearly_amount = salary.amount * (MONTHS_PER_YEAR if salary.type == "month" else 1)
    return yearly_amount / yearly_hours


def estimated_monthly_wage(
    salary: Salary,
    day_real_work_time: Optional[float] = None,
    week_work_time: Optional[float] = None,
    policy: WagePolicy = DEFAULT_POLICY,
) -> Optional[float]:
    """Monthly wage implied by ``salary``, or None without both working-time figures."""
    if not day_real_work_time or not week_work_time:
        return None

    if salary.type == "month":
        return float(salary.amount)
    if salary.type == "year":
        return salary.amount / MONTHS_PER_YEAR

    yearly_hours = policy.yearly_work_hours(week_work_time, day_real_work_time)
    if yearly_hours <= 0:
        return None
    if salary.type == "hour":
        return salary.amount * yearly_hours / MONTHS_PER_YEAR
    # day
    return salary.amount / day_real_work_time * yearly_hours / MONTHS_PER_YEAR
