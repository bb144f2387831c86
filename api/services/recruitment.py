"""Shortlisting and hiring candidates against a company's jobs."""

from typing import Any, Optional

from sqlalchemy import String, cast, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from api.schemas.company import (
    HireCandidateRequest,
    RemoveShortlistedPlayerRequest,
    ShortlistPlayerRequest,
)
from api.schemas.common import ListQuery
from api.schemas.jobs import JobsWithShortlistedQuery
from api.services.base import BaseService, success
from api.services.jobs import job_status_label
from core.exceptions import BadRequestError, NotFoundError, service_errors
from core.query import fetch_page, in_clause, paginated, search_clause, where_all
from core.shaping import lower_enum, map_employment_type, salary_payload, sample_avatars
from core.utils.datetime import isoformat
from database.models.jobs import Job, JobStatus, Shortlisted, ShortlistStatus
from database.models.players import Player

AVATARS_PER_JOB = 12
MAX_AVATAR_SAMPLE = 240


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def serialize_candidate(row: Shortlisted) -> dict[str, Any]:
    player = row.player
    return {
        "id": player.id,
        "name": player.user.name,
        "avatar": player.avatar,
        "createdAt": isoformat(row.created_at),
        "resume": player.resume,
        "userType": lower_enum(player.user.user_type),
    }


class RecruitmentService(BaseService):
    """
    Shortlist/hire status machine.

    A ``Shortlisted`` row is either NOT_HIRED or HIRED. Removing every hired
    candidate of a job reverts the rows to NOT_HIRED, while removing every
    shortlisted candidate deletes the rows.
    """

    async def _owned_job(self, session, company_id: str, job_id: str) -> Optional[str]:
        return await session.scalar(
            select(Job.id).where(Job.id == job_id, Job.company_id == company_id)
        )

    async def _active_owned_jobs(self, session, company_id: str, job_ids: list[str]) -> set[str]:
        result = await session.execute(
            select(Job.id).where(
                Job.id.in_(job_ids),
                Job.company_id == company_id,
                Job.status == JobStatus.ACTIVE,
            )
        )
        return set(result.scalars().all())

    async def _shortlisted_job_ids(self, session, player_id: str, job_ids: list[str]) -> set[str]:
        result = await session.execute(
            select(Shortlisted.job_id).where(
                Shortlisted.player_id == player_id, Shortlisted.job_id.in_(job_ids)
            )
        )
        return set(result.scalars().all())

    async def _avatars_by_job(
        self, session, job_ids: list[str], status: Optional[ShortlistStatus] = None
    ) -> dict[str, list[str]]:
        if not job_ids:
            return {}
        stmt = (
            select(Shortlisted.job_id, Player.avatar)
            .join(Player, Player.id == Shortlisted.player_id)
            .where(
                *where_all(
                    Shortlisted.job_id.in_(job_ids),
                    Shortlisted.status == status if status else None,
                )
            )
            .order_by(Shortlisted.created_at.desc())
            .limit(min(len(job_ids) * AVATARS_PER_JOB, MAX_AVATAR_SAMPLE))
        )
        rows = (await session.execute(stmt)).all()
        return sample_avatars(rows, "job_id", per_group=AVATARS_PER_JOB)

    async def _counts_by_job(
        self, session, job_ids: list[str], status: Optional[ShortlistStatus] = None
    ) -> dict[str, int]:
        if not job_ids:
            return {}
        result = await session.execute(
            select(Shortlisted.job_id, func.count(Shortlisted.id))
            .where(
                *where_all(
                    Shortlisted.job_id.in_(job_ids),
                    Shortlisted.status == status if status else None,
                )
            )
            .group_by(Shortlisted.job_id)
        )
        return {job_id: count for job_id, count in result.all()}

    # ==================== Shortlist ===================== #
    @service_errors("Failed to shortlist candidate")
    async def shortlist_player(
        self, company_id: str, dto: ShortlistPlayerRequest
    ) -> dict[str, Any]:
        self.logger.info(f"Shortlisting player {dto.candidate} for company: {company_id}")

        requested = _dedupe(dto.jobs)
        if not requested:
            return success("No jobs provided")

        # a concurrent request may insert between the existence check and commit
        for attempt in range(2):
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        valid = await self._active_owned_jobs(session, company_id, requested)
                        existing = await self._shortlisted_job_ids(
                            session, dto.candidate, requested
                        )

                        invalid_jobs = [job_id for job_id in requested if job_id not in valid]
                        already = [
                            job_id for job_id in requested if job_id in valid and job_id in existing
                        ]
                        to_create = [
                            job_id
                            for job_id in requested
                            if job_id in valid and job_id not in existing
                        ]

                        session.add_all(
                            Shortlisted(job_id=job_id, player_id=dto.candidate)
                            for job_id in to_create
                        )
                break
            except IntegrityError:
                if attempt:
                    raise
                self.logger.warning(
                    f"Shortlist for player {dto.candidate} changed concurrently, retrying"
                )

        return success(
            "Candidate shortlisted successfully",
            {"alreadyShortlistedJobs": already, "createdForJobs": to_create},
            invalidJobs=invalid_jobs,
        )

    @service_errors("Failed to remove candidate from shortlist")
    async def remove_shortlisted_player(
        self, company_id: str, dto: RemoveShortlistedPlayerRequest
    ) -> dict[str, Any]:
        self.logger.info(
            f"Removing player {dto.candidate} from shortlist for company: {company_id}"
        )

        requested = _dedupe(dto.jobs)
        if not requested:
            return success("No jobs provided")

        async with self.session_factory() as session:
            async with session.begin():
                valid = await self._active_owned_jobs(session, company_id, requested)
                rows = (
                    await session.execute(
                        select(Shortlisted.id, Shortlisted.job_id).where(
                            Shortlisted.player_id == dto.candidate,
                            Shortlisted.job_id.in_(requested),
                        )
                    )
                ).all()
                row_by_job = {job_id: row_id for row_id, job_id in rows}

                invalid_jobs = [job_id for job_id in requested if job_id not in valid]
                not_shortlisted = [
                    job_id for job_id in requested if job_id in valid and job_id not in row_by_job
                ]
                removed = [job_id for job_id in requested if job_id in valid and job_id in row_by_job]

                if removed:
                    await session.execute(
                        delete(Shortlisted).where(
                            Shortlisted.id.in_([row_by_job[job_id] for job_id in removed])
                        )
                    )

        return success(
            "Candidate removed from shortlist successfully",
            {
                "invalidJobs": invalid_jobs,
                "notShortlistedJobs": not_shortlisted,
                "removedFromJobs": removed,
            },
        )

    @service_errors("Failed to fetch jobs with shortlisted players")
    async def get_jobs_with_shortlisted_players(
        self, company_id: str, query: JobsWithShortlistedQuery
    ) -> dict[str, Any]:
        self.logger.info(f"Fetching jobs with shortlisted players for company: {company_id}")

        has_candidates = select(Shortlisted.id).where(
            Shortlisted.job_id == Job.id, Shortlisted.status == ShortlistStatus.NOT_HIRED
        )
        statuses = [JobStatus(s) for s in query.status] if query.status else None
        stmt = (
            select(Job)
            .where(
                Job.company_id == company_id,
                has_candidates.exists(),
                *where_all(
                    in_clause(Job.status, statuses),
                    search_clause(
                        query.search, Job.title, Job.description, cast(Job.type, String)
                    ),
                ),
            )
            .order_by(Job.created_at.desc())
        )

        async with self.session_factory() as session:
            jobs, total = await fetch_page(session, stmt, query.page, query.limit)
            job_ids = [job.id for job in jobs]
            counts = await self._counts_by_job(session, job_ids)
            avatars = await self._avatars_by_job(session, job_ids)

        data = [
            {
                "id": job.id,
                "title": job.title,
                "description": job.description,
                "role": job.role,
                "type": map_employment_type(job.type),
                "status": job_status_label(job.status),
                "location": job.location,
                "salary": salary_payload(job.salary),
                "createdAt": isoformat(job.created_at),
                "updatedAt": isoformat(job.updated_at),
                "shortlistedCount": counts.get(job.id, 0),
                "shortlistedAvatars": avatars.get(job.id, []),
            }
            for job in jobs
        ]
        return success(
            "Jobs with shortlisted players fetched successfully",
            paginated(data, total, query.page, query.limit),
        )

    @service_errors("Failed to fetch shortlisted players")
    async def get_shortlisted_players(
        self, company_id: str, job_id: str, query: ListQuery
    ) -> dict[str, Any]:
        self.logger.info(f"Fetching shortlisted players for job: {job_id}, company: {company_id}")

        stmt = (
            select(Shortlisted)
            .join(Job, Job.id == Shortlisted.job_id)
            .where(Shortlisted.job_id == job_id, Job.company_id == company_id)
            .options(selectinload(Shortlisted.player).selectinload(Player.user))
            .order_by(Shortlisted.created_at.desc())
        )

        async with self.session_factory() as session:
            rows, total = await fetch_page(session, stmt, query.page, query.limit)
            # an empty page is ambiguous: no candidates yet, or not our job
            if not rows and total == 0 and not await self._owned_job(session, company_id, job_id):
                raise BadRequestError("Job does not exist")

        return success(
            "Shortlisted players fetched successfully",
            paginated([serialize_candidate(row) for row in rows], total, query.page, query.limit),
        )

    @service_errors("Failed to remove shortlisted candidates")
    async def remove_all_shortlisted_under_job(self, company_id: str, job_id: str) -> dict[str, Any]:
        self.logger.info(
            f"Removing all shortlisted candidates for job: {job_id}, company: {company_id}"
        )

        async with self.session_factory() as session:
            async with session.begin():
                if not await self._owned_job(session, company_id, job_id):
                    raise NotFoundError("Job not found")
                await session.execute(delete(Shortlisted).where(Shortlisted.job_id == job_id))

        return success("All shortlisted candidates removed successfully")

    # ==================== Hire ===================== #
    async def _shortlist_row(self, session, company_id: str, dto: HireCandidateRequest) -> Shortlisted:
        if not await self._owned_job(session, company_id, dto.job):
            raise BadRequestError("Job does not exist")
        row = await session.scalar(
            select(Shortlisted).where(
                Shortlisted.job_id == dto.job, Shortlisted.player_id == dto.candidate
            )
        )
        if not row:
            raise BadRequestError("Candidate was not shortlisted for this job")
        return row

    @service_errors("Failed to hire candidate")
    async def hire_candidate(self, company_id: str, dto: HireCandidateRequest) -> dict[str, Any]:
        self.logger.info(
            f"Hiring candidate {dto.candidate} for job: {dto.job}, company: {company_id}"
        )

        async with self.session_factory() as session:
            async with session.begin():
                row = await self._shortlist_row(session, company_id, dto)
                row.status = ShortlistStatus.HIRED

        return success("Candidate hired successfully")

    @service_errors("Failed to unhire candidate")
    async def unhire_candidate(self, company_id: str, dto: HireCandidateRequest) -> dict[str, Any]:
        self.logger.info(
            f"Unhiring candidate {dto.candidate} for job: {dto.job}, company: {company_id}"
        )

        async with self.session_factory() as session:
            async with session.begin():
                row = await self._shortlist_row(session, company_id, dto)
                if row.status != ShortlistStatus.HIRED:
                    raise BadRequestError("Candidate is not hired for this job")
                row.status = ShortlistStatus.NOT_HIRED

        return success("Candidate unhired successfully")

    @service_errors("Failed to fetch jobs with hired players")
    async def get_jobs_with_hired_players(
        self, company_id: str, query: ListQuery
    ) -> dict[str, Any]:
        self.logger.info(f"Fetching jobs with hired players for company: {company_id}")

        has_hired = select(Shortlisted.id).where(
            Shortlisted.job_id == Job.id, Shortlisted.status == ShortlistStatus.HIRED
        )
        stmt = (
            select(Job)
            .where(
                Job.company_id == company_id,
                Job.status == JobStatus.ACTIVE,
                has_hired.exists(),
                *where_all(
                    search_clause(
                        query.search, Job.title, Job.description, cast(Job.type, String)
                    )
                ),
            )
            .order_by(Job.created_at.desc())
        )

        async with self.session_factory() as session:
            jobs, total = await fetch_page(session, stmt, query.page, query.limit)
            job_ids = [job.id for job in jobs]
            counts = await self._counts_by_job(session, job_ids, ShortlistStatus.HIRED)
            avatars = await self._avatars_by_job(session, job_ids, ShortlistStatus.HIRED)

        data = [
            {
                "id": job.id,
                "title": job.title,
                "status": lower_enum(job.status),
                "hiredCount": counts.get(job.id, 0),
                "hiredAvatars": avatars.get(job.id, []),
            }
            for job in jobs
        ]
        return success(
            "Jobs with hired players fetched successfully",
            paginated(data, total, query.page, query.limit),
        )

    @service_errors("Failed to fetch hired players")
    async def get_hired_players(
        self, company_id: str, job_id: str, query: ListQuery
    ) -> dict[str, Any]:
        self.logger.info(f"Fetching hired players for job: {job_id}, company: {company_id}")

        stmt = (
            select(Shortlisted)
            .where(Shortlisted.job_id == job_id, Shortlisted.status == ShortlistStatus.HIRED)
            .options(selectinload(Shortlisted.player).selectinload(Player.user))
            .order_by(Shortlisted.created_at.desc())
        )

        async with self.session_factory() as session:
            if not await self._owned_job(session, company_id, job_id):
                raise BadRequestError("Job does not exist")
            rows, total = await fetch_page(session, stmt, query.page, query.limit)

        return success(
            "Hired players fetched successfully",
            paginated([serialize_candidate(row) for row in rows], total, query.page, query.limit),
        )

    @service_errors("Failed to unhire candidates")
    async def remove_all_hired_under_job(self, company_id: str, job_id: str) -> dict[str, Any]:
        self.logger.info(f"Unhiring all candidates for job: {job_id}, company: {company_id}")

        async with self.session_factory() as session:
            async with session.begin():
                if not await self._owned_job(session, company_id, job_id):
                    raise NotFoundError("Job not found")
                result = await session.execute(
                    update(Shortlisted)
                    .where(
                        Shortlisted.job_id == job_id,
                        Shortlisted.status == ShortlistStatus.HIRED,
                    )
                    .values(status=ShortlistStatus.NOT_HIRED)
                )

        return success(
            "All hired candidates unhired successfully", {"unhiredCount": result.rowcount}
        )
