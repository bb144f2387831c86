"""Tests for company job management."""

import pytest
from sqlalchemy import func, select

from api.schemas.jobs import CreateJobRequest, GetJobsQuery, UpdateJobRequest
from api.services.jobs import JobService
from core.exceptions import NotFoundError
from database.models.jobs import (
    Application,
    DraftOrigin,
    Job,
    JobStatus,
    PlayerBookmark,
    Shortlisted,
)


@pytest.fixture
def service(session_factory):
    return JobService(session_factory=session_factory)


async def load_job(session_factory, job_id):
    async with session_factory() as session:
        return await session.get(Job, job_id)


class TestCreateJob:

    @pytest.mark.asyncio
    async def test_defaults(self, service, seed, session_factory):
        company = await seed.company()
        dto = CreateJobRequest.model_validate(
            {
                "title": "Goalkeeper coach",
                "role": "Coach",
                "description": "Train keepers",
                "type": "part-time",
                "skills": '["diving", "kicking"]',
                "salary": {"min": 100, "max": 200},
            }
        )

        result = await service.create_job(company.id, dto)

        assert result["success"] is True
        assert result["message"] == "Job created successfully"
        job = await load_job(session_factory, result["data"]["id"])
        assert job.status == JobStatus.ACTIVE
        assert job.type.value == "PART_TIME"
        assert job.skills == ["diving", "kicking"]
        assert job.draft_origin is None
        assert (job.end_date - job.start_date).days in (365, 366)

    @pytest.mark.asyncio
    async def test_draft_gets_never_posted(self, service, seed, session_factory):
        company = await seed.company()
        dto = CreateJobRequest.model_validate(
            {"title": "Scout", "role": "Scout", "description": "Find talent", "status": "drafted"}
        )
        result = await service.create_job(company.id, dto)
        job = await load_job(session_factory, result["data"]["id"])
        assert job.status == JobStatus.DRAFT
        assert job.draft_origin == DraftOrigin.NEVER_POSTED

    def test_invalid_type_rejected(self):
        with pytest.raises(ValueError):
            CreateJobRequest.model_validate(
                {"title": "x", "role": "x", "description": "x", "type": "weekly"}
            )


class TestListJobs:

    @pytest.mark.asyncio
    async def test_status_filter_and_shape(self, service, seed):
        company = await seed.company()
        other = await seed.company(name="Other")
        await seed.job(company, title="Active one")
        await seed.job(company, title="Draft one", status=JobStatus.DRAFT)
        await seed.job(other, title="Not ours")

        query = GetJobsQuery.model_validate({"status": ["DRAFTED"]})
        result = await service.get_all_jobs(company.id, query)

        data = result["data"]["data"]
        assert [job["title"] for job in data] == ["Draft one"]
        assert data[0]["status"] == "drafted"
        assert data[0]["draftOrigin"] == "never_posted"
        assert data[0]["type"] == "full-time"
        assert data[0]["salary"] == {"min": 0, "max": 0, "currency": "USD"}
        assert result["data"]["meta"] == {"total": 1, "totalPages": 1, "page": 1, "limit": 10}

    @pytest.mark.asyncio
    async def test_search_and_applicant_count(self, service, seed):
        company = await seed.company()
        player = await seed.player()
        job = await seed.job(company, title="Left winger")
        await seed.job(company, title="Physio")
        await seed.add(Application(job_id=job.id, player_id=player.id))

        result = await service.get_all_jobs(
            company.id, GetJobsQuery.model_validate({"search": "WINGER"})
        )
        data = result["data"]["data"]
        assert len(data) == 1
        assert data[0]["applicants"] == 1

    @pytest.mark.asyncio
    async def test_second_page(self, service, seed):
        company = await seed.company()
        for n in range(12):
            await seed.job(company, title=f"Job {n}")

        result = await service.get_all_jobs(
            company.id, GetJobsQuery.model_validate({"page": 2, "limit": 5})
        )

        assert len(result["data"]["data"]) == 5
        assert result["data"]["meta"] == {"total": 12, "totalPages": 3, "page": 2, "limit": 5}

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            GetJobsQuery.model_validate({"status": ["ARCHIVED"]})


class TestUpdateJob:

    @pytest.mark.asyncio
    async def test_active_to_draft_records_origin(self, service, seed, session_factory):
        company = await seed.company()
        job = await seed.job(company)

        result = await service.update_job(
            company.id, job.id, UpdateJobRequest.model_validate({"status": "draft"})
        )

        assert result["message"] == "Job updated successfully"
        job = await load_job(session_factory, job.id)
        assert job.status == JobStatus.DRAFT
        assert job.draft_origin == DraftOrigin.FROM_POSTED
        assert job.drafted_at is not None

    @pytest.mark.asyncio
    async def test_inactive_to_draft_keeps_origin(self, service, seed, session_factory):
        company = await seed.company()
        job = await seed.job(company, status=JobStatus.INACTIVE)

        await service.update_job(
            company.id, job.id, UpdateJobRequest.model_validate({"status": "draft"})
        )

        job = await load_job(session_factory, job.id)
        assert job.status == JobStatus.DRAFT
        assert job.draft_origin is None
        assert job.drafted_at is not None

    @pytest.mark.asyncio
    async def test_publish_clears_draft_metadata(self, service, seed, session_factory):
        company = await seed.company()
        job = await seed.job(
            company, status=JobStatus.DRAFT, draft_origin=DraftOrigin.NEVER_POSTED
        )

        await service.update_job(
            company.id, job.id, UpdateJobRequest.model_validate({"status": "active", "title": "New"})
        )

        job = await load_job(session_factory, job.id)
        assert job.status == JobStatus.ACTIVE
        assert job.title == "New"
        assert job.draft_origin is None
        assert job.drafted_at is None

    @pytest.mark.asyncio
    async def test_empty_body(self, service, seed):
        company = await seed.company()
        job = await seed.job(company)
        result = await service.update_job(company.id, job.id, UpdateJobRequest())
        assert result["message"] == "No changes detected"

    @pytest.mark.asyncio
    async def test_not_owned(self, service, seed):
        company = await seed.company()
        other = await seed.company(name="Other")
        job = await seed.job(other)
        with pytest.raises(NotFoundError, match="Job not found"):
            await service.update_job(
                company.id, job.id, UpdateJobRequest.model_validate({"title": "Mine now"})
            )


class TestGetAndDelete:

    @pytest.mark.asyncio
    async def test_get_missing(self, service, seed):
        company = await seed.company()
        with pytest.raises(NotFoundError):
            await service.get_job_by_id(company.id, "missing")

    @pytest.mark.asyncio
    async def test_delete_cascades(self, service, seed, session_factory):
        company = await seed.company()
        player = await seed.player()
        job = await seed.job(company)
        await seed.add(
            Shortlisted(job_id=job.id, player_id=player.id),
            Application(job_id=job.id, player_id=player.id),
            PlayerBookmark(job_id=job.id, player_id=player.id),
        )

        result = await service.delete_job(company.id, job.id)

        assert result["message"] == "Job deleted successfully"
        async with session_factory() as session:
            for model in (Job, Shortlisted, Application, PlayerBookmark):
                count = await session.scalar(select(func.count()).select_from(model))
                assert count == 0
