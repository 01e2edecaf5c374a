"""Tests for wage estimation."""

import pytest

from worktime.models.working import Salary
from worktime.services.workings.wage import (
    WagePolicy,
    estimated_hourly_wage,
    estimated_monthly_wage,
)


def test_hourly_salary_is_the_hourly_wage():
    assert estimated_hourly_wage(Salary(type="hour", amount=100)) == 100


def test_daily_salary_divided_by_real_work_time():
    assert estimated_hourly_wage(Salary(type="day", amount=10000), 10) == 1000


def test_monthly_salary_uses_yearly_work_hours():
    wage = estimated_hourly_wage(Salary(type="month", amount=10000), 10, 40)
    assert wage == pytest.approx(63, abs=1)
    assert wage == pytest.approx(10000 * 12 / (52 * 40 - 19 * 10))


def test_yearly_salary_uses_yearly_work_hours():
    wage = estimated_hourly_wage(Salary(type="year", amount=100000), 10, 40)
    assert wage == pytest.approx(52, abs=1)


@pytest.mark.parametrize(
    "salary_type,day_real_work_time,week_work_time",
    [
        ("day", None, 40),
        ("day", 0, 40),
        ("month", None, 40),
        ("month", 10, None),
        ("year", None, None),
    ],
)
def test_hourly_wage_is_undefined_without_work_time(
    salary_type, day_real_work_time, week_work_time
):
    salary = Salary(type=salary_type, amount=10000)
    assert estimated_hourly_wage(salary, day_real_work_time, week_work_time) is None


def test_hourly_wage_is_undefined_without_working_hours_left():
    # 52 * 1 - 19 * 10 < 0
    assert estimated_hourly_wage(Salary(type="month", amount=10000), 10, 1) is None


def test_hourly_wage_is_pure():
    salary = Salary(type="month", amount=35000)
    assert estimated_hourly_wage(salary, 9, 45) == estimated_hourly_wage(salary, 9, 45)


def test_policy_changes_the_days_off():
    salary = Salary(type="year", amount=100000)
    policy = WagePolicy(public_holidays=10, annual_leave_days=0)
    assert estimated_hourly_wage(salary, 10, 40, policy) == pytest.approx(
        100000 / (52 * 40 - 10 * 10)
    )


@pytest.mark.parametrize(
    "salary_type,amount,expected",
    [
        ("hour", 200, 200 * (52 * 40 - 19 * 10) / 12),
        ("day", 2000, 2000 / 10 * (52 * 40 - 19 * 10) / 12),
        ("month", 40000, 40000),
        ("year", 600000, 50000),
    ],
)
def test_monthly_wage(salary_type, amount, expected):
    salary = Salary(type=salary_type, amount=amount)
    assert estimated_monthly_wage(salary, 10, 40) == pytest.approx(expected)


@pytest.mark.parametrize("salary_type", ["hour", "day", "month", "year"])
def test_monthly_wage_is_undefined_without_work_time(salary_type):
    salary = Salary(type=salary_type, amount=100)
    assert estimated_monthly_wage(salary, None, 40) is None
    assert estimated_monthly_wage(salary, 10, None) is None
