"""Tests for the submission pipeline."""

from unittest.mock import AsyncMock, patch

import pytest

from worktime.db.repository import DatabaseError
from worktime.errors import NotFoundError, QuotaExceededError, ValidationError
from worktime.models.user import AuthUser, UserRef
from worktime.services.workings.submission import SubmissionService

RECOMMENDER = UserRef(id="AAA", type="facebook")
RECOMMENDATION_TOKEN = "00000000ccd8958909a983e8"


@pytest.fixture
def service(db, fixed_now):
    return SubmissionService(db, quota_limit=5, clock=lambda: fixed_now)


@pytest.mark.asyncio
async def test_submit_stores_and_returns_working(service, db, fake_user, make_payload):
    result = await service.submit(fake_user, make_payload("working_time"))

    working = result["working"]
    assert result["queries_count"] == 1
    assert working["author"] == {"id": "-1", "name": "mark", "type": "facebook"}
    assert working["company"] == {"id": "00000001", "name": "GOODJOB"}
    assert working["week_work_time"] == 40
    assert working["overtime_frequency"] == 3
    assert working["archive"] == {"is_archived": False, "reason": ""}
    assert working["status"] == "published"

    stored = await db.get_working(working["id"])
    assert stored is not None
    assert stored.job_title == "TEST"
    assert await db.count_workings() == 1


@pytest.mark.asyncio
async def test_job_title_is_upper_cased(service, fake_user, make_payload):
    result = await service.submit(fake_user, make_payload(job_title="GoodJob"))
    assert result["working"]["job_title"] == "GOODJOB"


@pytest.mark.asyncio
async def test_data_time_is_job_ending_time_when_not_employed(
    service, db, fake_user, make_payload
):
    payload = make_payload(
        is_currently_employed="no",
        job_ending_time_year="2023",
        job_ending_time_month="3",
    )
    result = await service.submit(fake_user, payload)

    stored = await db.get_working(result["working"]["id"])
    assert stored.data_time.year == 2023
    assert stored.data_time.month == 3
    assert stored.job_ending_time.year == 2023


@pytest.mark.asyncio
async def test_data_time_is_created_at_when_employed(service, db, fake_user, make_payload):
    result = await service.submit(fake_user, make_payload())

    stored = await db.get_working(result["working"]["id"])
    assert stored.data_time.year == 2024
    assert stored.data_time.month == 6
    assert stored.job_ending_time is None


@pytest.mark.asyncio
async def test_hourly_salary_gives_hourly_wage(service, fake_user, make_payload):
    payload = make_payload("salary", salary_type="hour", salary_amount="100")
    result = await service.submit(fake_user, payload)
    assert result["working"]["estimated_hourly_wage"] == 100


@pytest.mark.asyncio
async def test_monthly_salary_with_working_time(service, fake_user, make_payload):
    payload = make_payload(
        "all",
        salary_type="month",
        salary_amount="10000",
        day_real_work_time="10",
        week_work_time="40",
    )
    working = (await service.submit(fake_user, payload))["working"]

    assert working["estimated_hourly_wage"] == pytest.approx(63, abs=1)
    assert working["estimated_monthly_wage"] == 10000


@pytest.mark.asyncio
@pytest.mark.parametrize("salary_type", ["month", "year", "day"])
async def test_underivable_wage_is_not_stored(service, db, fake_user, make_payload, salary_type):
    payload = make_payload("salary", salary_type=salary_type, salary_amount="10000")
    result = await service.submit(fake_user, payload)

    document = await db.get_working_document(result["working"]["id"])
    assert "estimated_hourly_wage" not in document
    assert "estimated_monthly_wage" not in document


@pytest.mark.asyncio
async def test_working_time_only_has_no_wage(service, db, fake_user, make_payload):
    result = await service.submit(fake_user, make_payload("working_time"))

    document = await db.get_working_document(result["working"]["id"])
    assert "estimated_hourly_wage" not in document
    assert "salary" not in document


@pytest.mark.asyncio
async def test_unreliable_monthly_wage_is_dropped(db, fake_user, make_payload, fixed_now):
    service = SubmissionService(db, max_estimated_wage=1000, clock=lambda: fixed_now)
    payload = make_payload("all", salary_type="month", salary_amount="10000")

    working = (await service.submit(fake_user, payload))["working"]

    assert "estimated_monthly_wage" not in working
    assert "estimated_hourly_wage" in working


@pytest.mark.asyncio
async def test_validation_error_writes_nothing(service, db, fake_user, make_payload):
    with pytest.raises(ValidationError):
        await service.submit(fake_user, make_payload(job_title=None))

    assert await db.count_workings() == 0
    assert await db.get_quota_count(UserRef(id="-1", type="facebook")) == 0


@pytest.mark.asyncio
async def test_unknown_company_id_is_not_found(service, db, fake_user, make_payload):
    with pytest.raises(NotFoundError):
        await service.submit(fake_user, make_payload(company_id="12345678"))

    assert await db.get_quota_count(UserRef(id="-1", type="facebook")) == 0


@pytest.mark.asyncio
async def test_company_query_is_resolved(service, fake_user, make_payload):
    payload = make_payload(company_id=None, company="goodjob")
    working = (await service.submit(fake_user, payload))["working"]
    assert working["company"] == {"id": "00000001", "name": "GOODJOB"}


@pytest.mark.asyncio
async def test_ambiguous_company_query_has_no_id(service, fake_user, make_payload):
    payload = make_payload(company_id=None, company="mark chen")
    working = (await service.submit(fake_user, payload))["working"]
    assert working["company"] == {"name": "MARK CHEN"}


@pytest.mark.asyncio
async def test_quota_allows_five_submissions(service, db, fake_user, make_payload):
    for expected in range(1, 6):
        result = await service.submit(fake_user, make_payload())
        assert result["queries_count"] == expected

    with pytest.raises(QuotaExceededError):
        await service.submit(fake_user, make_payload())

    assert await db.get_quota_count(UserRef(id="-1", type="facebook")) == 5
    assert await db.count_workings() == 5


@pytest.mark.asyncio
async def test_quota_is_given_back_when_insert_fails(service, db, fake_user, make_payload):
    with patch.object(db, "insert_working", AsyncMock(side_effect=DatabaseError("disk full"))):
        with pytest.raises(DatabaseError):
            await service.submit(fake_user, make_payload())

    assert await db.get_quota_count(UserRef(id="-1", type="facebook")) == 0


@pytest.mark.asyncio
async def test_quota_is_per_user(service, fake_user, make_payload):
    other = AuthUser(id="-2", type="facebook", name="other")
    for _ in range(5):
        await service.submit(fake_user, make_payload())

    result = await service.submit(other, make_payload())
    assert result["queries_count"] == 1


@pytest.mark.asyncio
async def test_known_recommendation_is_credited(service, db, fake_user, make_payload):
    await db.insert_recommendation(RECOMMENDATION_TOKEN, RECOMMENDER)

    result = await service.submit(
        fake_user, make_payload(recommendation_string=RECOMMENDATION_TOKEN)
    )

    assert "recommended_by" not in result["working"]
    assert "recommendation_string" not in result["working"]
    stored = await db.get_working(result["working"]["id"])
    assert stored.recommended_by == RECOMMENDER
    assert await db.get_recommendation_count(RECOMMENDER) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "token", ["00000000ccd8958909a983e7", "00000000ccd8958909a983e6", "ABCD", "1234"]
)
async def test_unresolved_recommendation_is_stored_raw(service, db, fake_user, make_payload, token):
    result = await service.submit(fake_user, make_payload(recommendation_string=token))

    assert "recommended_by" not in result["working"]
    document = await db.get_working_document(result["working"]["id"])
    assert document["recommended_by"] == token
    assert "recommendation_string" not in document


@pytest.mark.asyncio
async def test_no_recommendation_given(service, db, fake_user, make_payload):
    result = await service.submit(fake_user, make_payload())

    document = await db.get_working_document(result["working"]["id"])
    assert "recommended_by" not in document


@pytest.mark.asyncio
async def test_recommendation_not_credited_when_quota_exceeded(
    service, db, fake_user, make_payload
):
    await db.insert_recommendation(RECOMMENDATION_TOKEN, RECOMMENDER)
    await db.set_quota_count(UserRef(id="-1", type="facebook"), 5)

    with pytest.raises(QuotaExceededError):
        await service.submit(
            fake_user, make_payload(recommendation_string=RECOMMENDATION_TOKEN)
        )

    assert await db.get_recommendation_count(RECOMMENDER) == 0


@pytest.mark.asyncio
async def test_email_subscribes_user(service, db, fake_user, make_payload):
    email = "goodjob@goodjob.life"
    result = await service.submit(fake_user, make_payload("salary", email=email))

    assert result["working"]["author"]["email"] == email
    user = await db.get_user(UserRef(id="-1", type="facebook"))
    assert user["email"] == email
    assert user["subscribe_email"] == 1


@pytest.mark.asyncio
async def test_optional_fields_are_kept(service, fake_user, make_payload):
    payload = make_payload(
        sector="tech",
        gender="female",
        campaign_name="engineer",
        about_this_job="I like my job",
        status="hidden",
        extra_info=[{"key": "mail", "value": "nice@goodjob.com"}],
    )
    working = (await service.submit(fake_user, payload))["working"]

    assert working["sector"] == "tech"
    assert working["gender"] == "female"
    assert working["campaign_name"] == "engineer"
    assert working["about_this_job"] == "I like my job"
    assert working["status"] == "hidden"
    assert working["extra_info"] == [{"key": "mail", "value": "nice@goodjob.com"}]


@pytest.mark.asyncio
async def test_unset_optional_fields_are_omitted(service, fake_user, make_payload):
    working = (await service.submit(fake_user, make_payload()))["working"]

    for field in ("gender", "sector", "has_overtime_salary", "extra_info", "job_ending_time"):
        assert field not in working


@pytest.mark.asyncio
async def test_follow_up_writes_do_not_fail_a_stored_submission(
    service, db, fake_user, make_payload
):
    await db.insert_recommendation(RECOMMENDATION_TOKEN, RECOMMENDER)
    payload = make_payload(
        recommendation_string=RECOMMENDATION_TOKEN, email="goodjob@goodjob.life"
    )

    with patch.object(
        db, "increment_recommendation_count", AsyncMock(side_effect=DatabaseError("locked"))
    ), patch.object(
        db, "update_subscribe_email", AsyncMock(side_effect=DatabaseError("locked"))
    ):
        result = await service.submit(fake_user, payload)

    assert result["queries_count"] == 1
    assert await db.count_workings() == 1
    assert await db.get_quota_count(UserRef(id="-1", type="facebook")) == 1
    assert await db.get_working(result["working"]["id"]) is not None
