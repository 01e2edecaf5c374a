"""
Salary/working-time submission pipeline.

One call to ``SubmissionService.submit`` handles one request, strictly in
order: extract, validate, normalize, resolve the company and the
referral, take quota, persist, shape the response. Nothing is written
before the quota step; the quota unit is given back if persisting fails.
Crediting the referrer and subscribing the email happen after the record
is stored and never fail the request.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from ...config import settings
from ...db.repository import WorktimeDatabase
from ...errors import MalformedTokenError, QuotaExceededError
from ...logging_config import log_structured
from ...models.submission import ValidatedSubmission
from ...models.user import AuthUser, UserRef
from ...models.working import Author, Company, Working, YearMonth
from .company import CompanyResolver
from .extractor import author_from_user, collect_fields
from .quota import QuotaManager
from .recommendation import RecommendationService
from .validators import validate_submission
from .wage import WagePolicy, estimated_hourly_wage, estimated_monthly_wage

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_working(
    validated: ValidatedSubmission,
    author: Author,
    company: Company,
    created_at: datetime,
    policy: WagePolicy,
    max_estimated_wage: float,
) -> Working:
    """Assemble the record to persist from validated groups.

    Derived wages above ``max_estimated_wage`` are treated as unreliable
    and left out, as are wages that cannot be derived at all.
    """
    raw = validated.raw
    common = validated.common
    working_time = validated.working_time
    salary_data = validated.salary

    if common.is_currently_employed == "no":
        data_time = YearMonth(
            year=common.job_ending_time.year, month=common.job_ending_time.month
        )
    else:
        data_time = YearMonth(year=created_at.year, month=created_at.month)

    values: Dict[str, Any] = dict(
        author=author,
        company=company,
        created_at=created_at,
        job_title=common.job_title.upper(),
        is_currently_employed=common.is_currently_employed,
        employment_type=common.employment_type,
        status=common.status,
        sector=raw.sector,
        gender=common.gender,
        campaign_name=raw.campaign_name,
        about_this_job=raw.about_this_job,
        extra_info=common.extra_info,
        job_ending_time=common.job_ending_time,
        data_time=data_time,
    )

    if working_time is not None:
        values.update(
            week_work_time=working_time.week_work_time,
            overtime_frequency=working_time.overtime_frequency,
            day_promised_work_time=working_time.day_promised_work_time,
            day_real_work_time=working_time.day_real_work_time,
            has_overtime_salary=working_time.has_overtime_salary,
            is_overtime_salary_legal=working_time.is_overtime_salary_legal,
            has_compensatory_dayoff=working_time.has_compensatory_dayoff,
        )

    if salary_data is not None:
        day_real_work_time = working_time.day_real_work_time if working_time else None
        week_work_time = working_time.week_work_time if working_time else None
        hourly = estimated_hourly_wage(
            salary_data.salary, day_real_work_time, week_work_time, policy
        )
        monthly = estimated_monthly_wage(
            salary_data.salary, day_real_work_time, week_work_time, policy
        )
        values.update(
            salary=salary_data.salary,
            experience_in_year=salary_data.experience_in_year,
            estimated_hourly_wage=_reliable(hourly, max_estimated_wage),
            estimated_monthly_wage=_reliable(monthly, max_estimated_wage),
        )

    return Working(**values)


def _reliable(wage: Optional[float], ceiling: float) -> Optional[float]:
    if wage is None or wage > ceiling:
        return None
    return wage


class SubmissionService:
    """Runs the submission pipeline against one storage handle."""

    def __init__(
        self,
        db: WorktimeDatabase,
        *,
        quota_limit: Optional[int] = None,
        wage_policy: Optional[WagePolicy] = None,
        max_estimated_wage: Optional[float] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.quota = QuotaManager(
            db, quota_limit if quota_limit is not None else settings.quota_limit
        )
        self.companies = CompanyResolver(db)
        self.recommendations = RecommendationService(db)
        self.wage_policy = wage_policy or WagePolicy.from_settings()
        self.max_estimated_wage = (
            max_estimated_wage
            if max_estimated_wage is not None
            else settings.max_estimated_wage
        )
        self.clock = clock

    async def _resolve_recommender(self, token: Optional[str]) -> Optional[UserRef]:
        if not token:
            return None
        try:
            return await self.recommendations.get_user_by_recommendation_string(token)
        except MalformedTokenError as e:
            logger.debug("Keeping raw recommendation token: %s", e)
            return None

    async def submit(self, user: AuthUser, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate, normalize and store one submission of ``user``.

        Returns:
            ``{"working": <stored record minus recommended_by>, "queries_count": int}``

        Raises:
            ValidationError: If a field rule is violated (first one only)
            NotFoundError: If the given company id is unknown
            QuotaExceededError: If the user has no quota left
        """
        created_at = self.clock()
        fields = collect_fields(payload)

        validated = validate_submission(fields, created_at)
        if not validated.ok:
            log_structured(
                logger,
                "info",
                "validating fail",
                user_id=user.id,
                reason=validated.error.message,
            )
            raise validated.error

        common = validated.value.common
        company = await self.companies.resolve(common.company_id, common.company_query)
        working = build_working(
            validated.value,
            author_from_user(user, common.email),
            company,
            created_at,
            self.wage_policy,
            self.max_estimated_wage,
        )

        recommender = await self._resolve_recommender(fields.recommendation_string)
        if recommender is not None:
            working.recommended_by = recommender
        elif fields.recommendation_string:
            working.recommended_by = fields.recommendation_string

        author_ref = working.author.ref
        try:
            queries_count = await self.quota.check_and_update_quota(author_ref)
        except QuotaExceededError:
            log_structured(logger, "warning", "workings quota rejected", user_id=user.id)
            raise

        try:
            await self.db.insert_working(working)
        except Exception as e:
            log_structured(
                logger, "info", "workings insert data fail", id=working.id, error=str(e)
            )
            await self.quota.release(author_ref)
            raise

        log_structured(
            logger,
            "info",
            "workings insert data success",
            id=working.id,
            author_type=working.author.type,
            queries_count=queries_count,
        )

        if recommender is not None:
            try:
                await self.recommendations.credit(recommender)
            except Exception:
                logger.warning(
                    "Failed to credit recommendation of %s:%s",
                    recommender.type,
                    recommender.id,
                    exc_info=True,
                )
        if common.email:
            try:
                await self.db.update_subscribe_email(author_ref, common.email)
            except Exception:
                logger.warning(
                    "Failed to subscribe email of %s:%s",
                    author_ref.type,
                    author_ref.id,
                    exc_info=True,
                )

        return {"working": working.to_response(), "queries_count": queries_count}
