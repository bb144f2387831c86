"""Tests for the shortlist/hire pipeline."""

from unittest.mock import patch

import pytest
from sqlalchemy import select

from api.schemas.common import ListQuery
from api.schemas.company import (
    HireCandidateRequest,
    RemoveShortlistedPlayerRequest,
    ShortlistPlayerRequest,
)
from api.schemas.jobs import JobsWithShortlistedQuery
from api.services.recruitment import RecruitmentService
from core.exceptions import BadRequestError, NotFoundError
from database.models.jobs import JobStatus, Shortlisted, ShortlistStatus


@pytest.fixture
def service(session_factory):
    return RecruitmentService(session_factory=session_factory)


async def shortlist_rows(session_factory, player_id=None):
    async with session_factory() as session:
        stmt = select(Shortlisted)
        if player_id:
            stmt = stmt.where(Shortlisted.player_id == player_id)
        return list((await session.execute(stmt)).scalars().all())


class TestShortlist:

    @pytest.mark.asyncio
    async def test_partitions_requested_jobs(self, service, seed, session_factory):
        company = await seed.company()
        other = await seed.company(name="Other")
        player = await seed.player()
        fresh = await seed.job(company, title="Fresh")
        existing = await seed.job(company, title="Existing")
        draft = await seed.job(company, title="Draft", status=JobStatus.DRAFT)
        foreign = await seed.job(other, title="Foreign")
        await seed.add(Shortlisted(job_id=existing.id, player_id=player.id))

        dto = ShortlistPlayerRequest(
            candidate=player.id,
            jobs=[fresh.id, existing.id, draft.id, foreign.id, fresh.id, "missing"],
        )
        result = await service.shortlist_player(company.id, dto)

        assert result["message"] == "Candidate shortlisted successfully"
        assert result["data"] == {
            "alreadyShortlistedJobs": [existing.id],
            "createdForJobs": [fresh.id],
        }
        assert result["invalidJobs"] == [draft.id, foreign.id, "missing"]
        rows = await shortlist_rows(session_factory, player.id)
        assert sorted(row.job_id for row in rows) == sorted([fresh.id, existing.id])
        assert all(row.status == ShortlistStatus.NOT_HIRED for row in rows)

    @pytest.mark.asyncio
    async def test_repeat_is_idempotent(self, service, seed, session_factory):
        company = await seed.company()
        player = await seed.player()
        job = await seed.job(company)
        dto = ShortlistPlayerRequest(candidate=player.id, jobs=[job.id])

        await service.shortlist_player(company.id, dto)
        result = await service.shortlist_player(company.id, dto)

        assert result["data"] == {"alreadyShortlistedJobs": [job.id], "createdForJobs": []}
        assert len(await shortlist_rows(session_factory)) == 1

    @pytest.mark.asyncio
    async def test_concurrent_insert_reported_as_already_shortlisted(
        self, service, seed, session_factory
    ):
        company = await seed.company()
        player = await seed.player()
        raced = await seed.job(company, title="Raced")
        fresh = await seed.job(company, title="Fresh")
        # committed by another request after this one checked for existing rows
        await seed.add(Shortlisted(job_id=raced.id, player_id=player.id))

        real_lookup = service._shortlisted_job_ids
        lookups = []

        async def stale_then_real(session, player_id, job_ids):
            lookups.append(job_ids)
            if len(lookups) == 1:
                return set()
            return await real_lookup(session, player_id, job_ids)

        with patch.object(service, "_shortlisted_job_ids", side_effect=stale_then_real):
            result = await service.shortlist_player(
                company.id, ShortlistPlayerRequest(candidate=player.id, jobs=[raced.id, fresh.id])
            )

        assert len(lookups) == 2
        assert result["data"] == {
            "alreadyShortlistedJobs": [raced.id],
            "createdForJobs": [fresh.id],
        }
        assert len(await shortlist_rows(session_factory, player.id)) == 2

    @pytest.mark.asyncio
    async def test_no_jobs(self, service, seed):
        company = await seed.company()
        result = await service.shortlist_player(
            company.id, ShortlistPlayerRequest(candidate="p", jobs=[])
        )
        assert result == {"success": True, "message": "No jobs provided"}

    @pytest.mark.asyncio
    async def test_remove(self, service, seed, session_factory):
        company = await seed.company()
        player = await seed.player()
        listed = await seed.job(company, title="Listed")
        unlisted = await seed.job(company, title="Unlisted")
        await seed.add(Shortlisted(job_id=listed.id, player_id=player.id))

        result = await service.remove_shortlisted_player(
            company.id,
            RemoveShortlistedPlayerRequest(
                candidate=player.id, jobs=[listed.id, unlisted.id, "missing"]
            ),
        )

        assert result["data"] == {
            "invalidJobs": ["missing"],
            "notShortlistedJobs": [unlisted.id],
            "removedFromJobs": [listed.id],
        }
        assert await shortlist_rows(session_factory) == []


class TestShortlistListings:

    @pytest.mark.asyncio
    async def test_jobs_with_shortlisted(self, service, seed):
        company = await seed.company()
        job = await seed.job(company, title="With candidates")
        await seed.job(company, title="Empty")
        for i in range(3):
            player = await seed.player(name=f"P{i}", avatar=f"https://cdn.test/{i}.png")
            await seed.add(Shortlisted(job_id=job.id, player_id=player.id))

        result = await service.get_jobs_with_shortlisted_players(
            company.id, JobsWithShortlistedQuery()
        )

        data = result["data"]["data"]
        assert [row["title"] for row in data] == ["With candidates"]
        assert data[0]["shortlistedCount"] == 3
        assert len(data[0]["shortlistedAvatars"]) == 3
        assert data[0]["status"] == "active"

    @pytest.mark.asyncio
    async def test_shortlisted_players_for_job(self, service, seed):
        company = await seed.company()
        job = await seed.job(company)
        player = await seed.player(name="Ana")
        await seed.add(Shortlisted(job_id=job.id, player_id=player.id))

        result = await service.get_shortlisted_players(company.id, job.id, ListQuery())

        [row] = result["data"]["data"]
        assert row["id"] == player.id
        assert row["name"] == "Ana"
        assert row["userType"] == "player"

    @pytest.mark.asyncio
    async def test_shortlisted_players_empty_owned_job(self, service, seed):
        company = await seed.company()
        job = await seed.job(company)
        result = await service.get_shortlisted_players(company.id, job.id, ListQuery())
        assert result["data"]["data"] == []

    @pytest.mark.asyncio
    async def test_shortlisted_players_foreign_job(self, service, seed):
        company = await seed.company()
        other = await seed.company(name="Other")
        job = await seed.job(other)
        with pytest.raises(BadRequestError, match="Job does not exist"):
            await service.get_shortlisted_players(company.id, job.id, ListQuery())

    @pytest.mark.asyncio
    async def test_remove_all_under_job(self, service, seed, session_factory):
        company = await seed.company()
        job = await seed.job(company)
        for i in range(2):
            player = await seed.player(name=f"P{i}")
            await seed.add(Shortlisted(job_id=job.id, player_id=player.id))

        await service.remove_all_shortlisted_under_job(company.id, job.id)
        assert await shortlist_rows(session_factory) == []

        with pytest.raises(NotFoundError, match="Job not found"):
            await service.remove_all_shortlisted_under_job(company.id, "missing")


class TestHire:

    @pytest.mark.asyncio
    async def test_hire_then_unhire(self, service, seed, session_factory):
        company = await seed.company()
        player = await seed.player()
        job = await seed.job(company)
        await seed.add(Shortlisted(job_id=job.id, player_id=player.id))
        dto = HireCandidateRequest(candidate=player.id, job=job.id)

        assert (await service.hire_candidate(company.id, dto))["message"] == (
            "Candidate hired successfully"
        )
        [row] = await shortlist_rows(session_factory)
        assert row.status == ShortlistStatus.HIRED

        assert (await service.unhire_candidate(company.id, dto))["message"] == (
            "Candidate unhired successfully"
        )
        [row] = await shortlist_rows(session_factory)
        assert row.status == ShortlistStatus.NOT_HIRED

    @pytest.mark.asyncio
    async def test_hire_requires_shortlist(self, service, seed):
        company = await seed.company()
        player = await seed.player()
        job = await seed.job(company)
        with pytest.raises(BadRequestError, match="not shortlisted"):
            await service.hire_candidate(
                company.id, HireCandidateRequest(candidate=player.id, job=job.id)
            )

    @pytest.mark.asyncio
    async def test_hire_foreign_job(self, service, seed):
        company = await seed.company()
        other = await seed.company(name="Other")
        job = await seed.job(other)
        with pytest.raises(BadRequestError, match="Job does not exist"):
            await service.hire_candidate(
                company.id, HireCandidateRequest(candidate="p", job=job.id)
            )

    @pytest.mark.asyncio
    async def test_unhire_when_not_hired(self, service, seed):
        company = await seed.company()
        player = await seed.player()
        job = await seed.job(company)
        await seed.add(Shortlisted(job_id=job.id, player_id=player.id))
        with pytest.raises(BadRequestError, match="not hired"):
            await service.unhire_candidate(
                company.id, HireCandidateRequest(candidate=player.id, job=job.id)
            )


class TestHiredListings:

    @pytest.mark.asyncio
    async def test_jobs_with_hired_count_hired_rows_only(self, service, seed):
        company = await seed.company()
        job = await seed.job(company, title="Hiring")
        only_shortlisted = await seed.job(company, title="Only shortlisted")
        hired = await seed.player(name="Hired", avatar="https://cdn.test/h.png")
        waiting = await seed.player(name="Waiting", avatar="https://cdn.test/w.png")
        await seed.add(
            Shortlisted(job_id=job.id, player_id=hired.id, status=ShortlistStatus.HIRED),
            Shortlisted(job_id=job.id, player_id=waiting.id),
            Shortlisted(job_id=only_shortlisted.id, player_id=waiting.id),
        )

        result = await service.get_jobs_with_hired_players(company.id, ListQuery())

        assert result["data"]["data"] == [
            {
                "id": job.id,
                "title": "Hiring",
                "status": "active",
                "hiredCount": 1,
                "hiredAvatars": ["https://cdn.test/h.png"],
            }
        ]

    @pytest.mark.asyncio
    async def test_hired_players_for_job(self, service, seed):
        company = await seed.company()
        job = await seed.job(company)
        hired = await seed.player(name="Hired")
        waiting = await seed.player(name="Waiting")
        await seed.add(
            Shortlisted(job_id=job.id, player_id=hired.id, status=ShortlistStatus.HIRED),
            Shortlisted(job_id=job.id, player_id=waiting.id),
        )

        result = await service.get_hired_players(company.id, job.id, ListQuery())
        assert [row["name"] for row in result["data"]["data"]] == ["Hired"]

    @pytest.mark.asyncio
    async def test_remove_all_hired_reverts_status(self, service, seed, session_factory):
        company = await seed.company()
        job = await seed.job(company)
        for i in range(2):
            player = await seed.player(name=f"P{i}")
            await seed.add(
                Shortlisted(job_id=job.id, player_id=player.id, status=ShortlistStatus.HIRED)
            )

        result = await service.remove_all_hired_under_job(company.id, job.id)

        assert result["data"] == {"unhiredCount": 2}
        rows = await shortlist_rows(session_factory)
        assert len(rows) == 2
        assert all(row.status == ShortlistStatus.NOT_HIRED for row in rows)
