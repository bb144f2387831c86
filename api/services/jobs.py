"""Company job management."""

from typing import Any, Optional

from sqlalchemy import String, cast, delete, func, select

from api.schemas.jobs import CreateJobRequest, GetJobsQuery, UpdateJobRequest
from api.services.base import BaseService, success
from core.exceptions import NotFoundError, service_errors
from core.query import (
    date_range_clause,
    fetch_page,
    in_clause,
    paginated,
    search_clause,
    where_all,
)
from core.shaping import lower_enum, map_employment_type, salary_payload
from core.utils.datetime import add_years, isoformat, now
from database.models.jobs import (
    Application,
    DraftOrigin,
    EmploymentType,
    Job,
    JobStatus,
    PlayerBookmark,
    Shortlisted,
)

# Query-string status tokens for the company job list
LIST_STATUS_MAP = {"ACTIVE": JobStatus.ACTIVE, "DRAFTED": JobStatus.DRAFT}


def job_status_label(status: JobStatus) -> str:
    return "drafted" if status == JobStatus.DRAFT else lower_enum(status)


def draft_metadata(job: Job, applicants: int) -> tuple[str, Optional[str]]:
    """
    ``(draftOrigin, draftedAt)`` for a job.

    Stored values win. Older drafts without them are classified by whether
    anyone ever applied.
    """
    if job.draft_origin is not None:
        origin = job.draft_origin.value
    elif job.status == JobStatus.DRAFT and applicants > 0:
        origin = DraftOrigin.FROM_POSTED.value
    else:
        origin = DraftOrigin.NEVER_POSTED.value

    if job.drafted_at is not None:
        drafted_at = job.drafted_at
    elif job.status == JobStatus.DRAFT:
        drafted_at = job.updated_at or job.created_at
    else:
        drafted_at = job.created_at
    return origin, isoformat(drafted_at)


def serialize_job(job: Job, applicants: int) -> dict[str, Any]:
    draft_origin, drafted_at = draft_metadata(job, applicants)
    return {
        "id": job.id,
        "title": job.title,
        "role": job.role,
        "type": map_employment_type(job.type),
        "description": job.description,
        "responsibilities": job.responsibilities or [],
        "qualifications": job.qualifications or [],
        "skills": job.skills or [],
        "traits": job.traits or [],
        "tags": job.tags or [],
        "location": job.location,
        "salary": salary_payload(job.salary),
        "startDate": isoformat(job.start_date or job.created_at),
        "endDate": isoformat(job.end_date),
        "openToAll": bool(job.open_to_all),
        "applicants": applicants,
        "status": job_status_label(job.status),
        "draftOrigin": draft_origin,
        "draftedAt": drafted_at,
        "createdAt": isoformat(job.created_at),
    }


class JobService(BaseService):
    """Create, list, update and delete a company's job postings."""

    async def _application_counts(self, session, job_ids: list[str]) -> dict[str, int]:
        if not job_ids:
            return {}
        result = await session.execute(
            select(Application.job_id, func.count(Application.id))
            .where(Application.job_id.in_(job_ids))
            .group_by(Application.job_id)
        )
        return {job_id: count for job_id, count in result.all()}

    @service_errors("Failed to fetch jobs")
    async def get_all_jobs(self, company_id: str, query: GetJobsQuery) -> dict[str, Any]:
        self.logger.info(f"Fetching jobs for company: {company_id}")

        statuses = [LIST_STATUS_MAP[s] for s in query.status] if query.status else None
        origins = [DraftOrigin(o) for o in query.draft_origin] if query.draft_origin else None

        stmt = (
            select(Job)
            .where(
                Job.company_id == company_id,
                *where_all(
                    in_clause(Job.status, statuses),
                    search_clause(
                        query.search, Job.title, Job.description, cast(Job.type, String)
                    ),
                    date_range_clause(Job.created_at, query.created_at),
                    in_clause(Job.draft_origin, origins),
                    date_range_clause(Job.drafted_at, query.drafted_at),
                ),
            )
            .order_by(Job.created_at.desc())
        )

        async with self.session_factory() as session:
            jobs, total = await fetch_page(session, stmt, query.page, query.limit)
            counts = await self._application_counts(session, [job.id for job in jobs])

        data = [serialize_job(job, counts.get(job.id, 0)) for job in jobs]
        return success(
            "Jobs fetched successfully", paginated(data, total, query.page, query.limit)
        )

    @service_errors("Failed to create job")
    async def create_job(self, company_id: str, dto: CreateJobRequest) -> dict[str, Any]:
        self.logger.info(f"Creating job for company: {company_id}")

        status = dto.status or JobStatus.ACTIVE
        created_at = now()
        job = Job(
            company_id=company_id,
            title=dto.title,
            description=dto.description,
            role=dto.role,
            location=dto.location or "",
            type=EmploymentType(dto.type) if dto.type else EmploymentType.FULL_TIME,
            skills=dto.skills or [],
            responsibilities=dto.responsibilities or [],
            qualifications=dto.qualifications or [],
            traits=dto.traits or [],
            tags=dto.tags or [],
            salary=dto.salary.model_dump(exclude_none=True) if dto.salary else {},
            start_date=dto.start_date or created_at,
            end_date=add_years(created_at, 1),
            open_to_all=bool(dto.open_to_all),
            status=status,
            draft_origin=DraftOrigin.NEVER_POSTED if status == JobStatus.DRAFT else None,
        )

        async with self.session_factory() as session:
            session.add(job)
            await session.commit()

        return success("Job created successfully", {"id": job.id})

    @service_errors("Failed to fetch job")
    async def get_job_by_id(self, company_id: str, job_id: str) -> dict[str, Any]:
        self.logger.info(f"Fetching job {job_id} for company: {company_id}")

        async with self.session_factory() as session:
            job = await session.scalar(
                select(Job).where(Job.id == job_id, Job.company_id == company_id)
            )
            if not job:
                raise NotFoundError("Job not found")
            counts = await self._application_counts(session, [job.id])

        return success("Job fetched successfully", serialize_job(job, counts.get(job.id, 0)))

    @service_errors("Failed to update job")
    async def update_job(
        self, company_id: str, job_id: str, dto: UpdateJobRequest
    ) -> dict[str, Any]:
        self.logger.info(f"Updating job {job_id} for company: {company_id}")

        changes = dto.model_dump(exclude_unset=True)
        if not changes:
            return success("No changes detected")

        async with self.session_factory() as session:
            async with session.begin():
                job = await session.scalar(
                    select(Job).where(Job.id == job_id, Job.company_id == company_id)
                )
                if not job:
                    raise NotFoundError("Job not found")

                for field in (
                    "title",
                    "description",
                    "role",
                    "location",
                    "skills",
                    "responsibilities",
                    "qualifications",
                    "traits",
                    "tags",
                    "start_date",
                    "open_to_all",
                ):
                    if field in changes and changes[field] is not None:
                        setattr(job, field, changes[field])

                if dto.type:
                    job.type = EmploymentType(dto.type)
                if dto.salary is not None:
                    job.salary = dto.salary.model_dump(exclude_none=True)

                if dto.status is not None:
                    self._apply_status_transition(job, dto.status)

        return success("Job updated successfully")

    @staticmethod
    def _apply_status_transition(job: Job, new_status: JobStatus) -> None:
        """
        ACTIVE -> DRAFT records ``from_posted``; INACTIVE -> DRAFT keeps the
        existing origin; both stamp ``drafted_at``. Publishing clears both.
        """
        if new_status == JobStatus.DRAFT:
            if job.status == JobStatus.ACTIVE:
                job.draft_origin = DraftOrigin.FROM_POSTED
                job.drafted_at = now()
            elif job.status == JobStatus.INACTIVE:
                job.drafted_at = now()
        elif new_status == JobStatus.ACTIVE:
            job.draft_origin = None
            job.drafted_at = None
        job.status = new_status

    @service_errors("Failed to delete job")
    async def delete_job(self, company_id: str, job_id: str) -> dict[str, Any]:
        self.logger.info(f"Deleting job {job_id} for company: {company_id}")

        async with self.session_factory() as session:
            async with session.begin():
                job = await session.scalar(
                    select(Job.id).where(Job.id == job_id, Job.company_id == company_id)
                )
                if not job:
                    raise NotFoundError("Job not found")

                await session.execute(delete(Shortlisted).where(Shortlisted.job_id == job_id))
                await session.execute(delete(Application).where(Application.job_id == job_id))
                await session.execute(
                    delete(PlayerBookmark).where(PlayerBookmark.job_id == job_id)
                )
                await session.execute(delete(Job).where(Job.id == job_id))

        return success("Job deleted successfully")
