"""Test configuration and fixtures."""

import os
from datetime import datetime, timezone

import pytest
import pytest_asyncio

# Test configuration
TEST_LOG_DIR = os.path.join(os.path.dirname(__file__), "test_logs")

# Must be set before worktime.config builds its settings singleton
os.environ.setdefault("LOG_DIR", TEST_LOG_DIR)

from worktime.db.repository import WorktimeDatabase  # noqa: E402
from worktime.models.user import AuthUser  # noqa: E402

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

SEED_COMPANIES = [
    {"id": "00000001", "name": "GOODJOB"},
    {"id": "00000002", "name": "MARK CHEN"},
    {"id": "00000003", "name": "MARK CHEN"},
    {"id": "00000004", "name": "GOODJOBGREAT"},
]

WORKING_TIME_PAYLOAD = {
    "job_title": "test",
    "company_id": "00000001",
    "is_currently_employed": "yes",
    "employment_type": "full-time",
    "week_work_time": "40",
    "overtime_frequency": "3",
    "day_promised_work_time": "8",
    "day_real_work_time": "10",
    "status": "published",
}

SALARY_PAYLOAD = {
    "job_title": "test",
    "company_id": "00000001",
    "is_currently_employed": "yes",
    "employment_type": "full-time",
    "salary_type": "year",
    "salary_amount": "10000",
    "experience_in_year": "10",
    "status": "published",
}

ALL_PAYLOAD = {**WORKING_TIME_PAYLOAD, **SALARY_PAYLOAD}

PAYLOADS = {
    "working_time": WORKING_TIME_PAYLOAD,
    "salary": SALARY_PAYLOAD,
    "all": ALL_PAYLOAD,
}


@pytest.fixture
def make_payload():
    """Build a valid payload of the given kind; an override of None drops the key."""

    def _make(kind: str = "working_time", **overrides):
        payload = dict(PAYLOADS[kind])
        for key, value in overrides.items():
            if value is None:
                payload.pop(key, None)
            else:
                payload[key] = value
        return payload

    return _make


@pytest.fixture
def seed_companies():
    return [dict(c) for c in SEED_COMPANIES]


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fake_user():
    return AuthUser(id="-1", type="facebook", name="mark")


@pytest.fixture
def test_db_path(tmp_path):
    """Provide a throwaway database file path."""
    return str(tmp_path / "worktime.db")


@pytest_asyncio.fixture
async def db(test_db_path):
    """An initialized database seeded with a small company directory."""
    database = await WorktimeDatabase(test_db_path).ainit()
    await database.insert_companies(SEED_COMPANIES)
    yield database
    await database.close()
