"""Player and supporter features: profile, onboarding, job board and applications."""

from typing import Any, Optional

from fastapi import UploadFile
from sqlalchemy import String, cast, delete, func, select
from sqlalchemy.orm import selectinload

from api.schemas.common import ListQuery
from api.schemas.jobs import ApplyJobForm, JobTrackingQuery, PlayerJobsQuery
from api.schemas.players import (
    ExperienceSchema,
    PlayerCompleteProfileForm,
    PlayerUpdateProfileForm,
)
from api.services.base import BaseService, push_recent, success
from core.exceptions import BadRequestError, NotFoundError, service_errors
from core.onboarding import OnboardingSteps
from core.query import fetch_page, in_clause, paginated, pagination_meta, search_clause, where_all
from core.security import hash_secret
from core.shaping import (
    club_payload,
    lower_enum,
    lower_role_document,
    map_employment_type,
    map_employment_types,
    salary_payload,
)
from core.storage.s3 import FileType
from core.utils.datetime import isoformat, now
from database.models.companies import Company
from database.models.jobs import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    PlayerBookmark,
)
from database.models.players import Experience, Player
from database.models.users import Affiliate, AffiliateType, User, UserType

MAX_WORK_LOCATIONS = 5
MAX_RESPONSIBILITIES = 7
CERTIFICATION_FIELDS = tuple(f"certifications{i}" for i in range(5))
NOT_APPLIED = "not_applied"

# step -> profile fields copied when truthy
STEP_FIELDS = {
    1: (
        "about",
        "address",
        "shirt_number",
        "birth_year",
        "sports_history",
        "industry",
        "years_of_experience",
    ),
    3: ("traits", "skills"),
}
UPDATE_FIELDS = (
    "about",
    "country",
    "address",
    "work_availability",
    "years_of_experience",
    "shirt_number",
    "birth_year",
    "sports_history",
    "industry",
    "traits",
    "skills",
    "certifications",
    "resume",
)


def check_work_locations(locations: Optional[list[str]]) -> None:
    if locations is not None and len(locations) > MAX_WORK_LOCATIONS:
        raise BadRequestError("workLocations cannot exceed 5 locations")


def check_experiences(experiences: Optional[list[ExperienceSchema]]) -> None:
    for experience in experiences or []:
        if len(experience.responsibilities or []) > MAX_RESPONSIBILITIES:
            raise BadRequestError("Experience responsibilities cannot exceed 7 items")


def build_experience(player_id: str, experience: ExperienceSchema) -> Experience:
    return Experience(
        player_id=player_id,
        title=experience.title,
        company=experience.company,
        current=bool(experience.current),
        remote=bool(experience.remote),
        start_date=experience.start_date,
        end_date=experience.end_date,
        company_phone=experience.company_phone,
        company_email=experience.company_email,
        skills=experience.skills or [],
        tools=experience.tools or [],
        responsibilities=experience.responsibilities or [],
    )


def serialize_experience(experience: Experience) -> dict[str, Any]:
    return {
        "id": experience.id,
        "title": experience.title,
        "company": experience.company,
        "current": experience.current,
        "remote": experience.remote,
        "startDate": isoformat(experience.start_date),
        "endDate": isoformat(experience.end_date),
        "companyPhone": experience.company_phone,
        "companyEmail": experience.company_email,
        "skills": experience.skills or [],
        "tools": experience.tools or [],
        "responsibilities": experience.responsibilities or [],
    }


def application_label(status: Optional[ApplicationStatus]) -> str:
    return lower_enum(status) if status else NOT_APPLIED


class PlayerService(BaseService):
    """
    Operations of PLAYER and SUPPORTER accounts.

    Both roles share the ``Player`` profile; the job board itself is limited
    to PLAYER accounts at the route level.
    """

    async def _get_player(self, session, player_id: str, message: str = "Player not found") -> Player:
        player = await session.scalar(
            select(Player).where(Player.id == player_id).options(selectinload(Player.user))
        )
        if not player:
            raise NotFoundError(message)
        return player

    async def _bookmarked(self, session, player_id: str, job_ids: list[str]) -> set[str]:
        if not job_ids:
            return set()
        result = await session.execute(
            select(PlayerBookmark.job_id).where(
                PlayerBookmark.player_id == player_id, PlayerBookmark.job_id.in_(job_ids)
            )
        )
        return set(result.scalars().all())

    async def _applications(
        self, session, player_id: str, job_ids: list[str]
    ) -> dict[str, Application]:
        if not job_ids:
            return {}
        result = await session.execute(
            select(Application).where(
                Application.player_id == player_id, Application.job_id.in_(job_ids)
            )
        )
        return {app.job_id: app for app in result.scalars().all()}

    # ==================== Profile ===================== #
    @service_errors("Failed to retrieve profile. Please try again later.")
    async def get_profile(self, player_id: str) -> dict[str, Any]:
        self.logger.info(f"Fetching profile for player: {player_id}")

        async with self.session_factory() as session:
            player = await session.scalar(
                select(Player)
                .where(Player.id == player_id)
                .options(selectinload(Player.user), selectinload(Player.experiences))
            )
            if not player:
                raise NotFoundError("Profile not found")
            affiliate = await session.scalar(
                select(Affiliate)
                .where(
                    Affiliate.user_id == player.user_id,
                    Affiliate.type.in_([AffiliateType.PLAYER, AffiliateType.SUPPORTER]),
                )
                .options(selectinload(Affiliate.club))
                .limit(1)
            )

        user = player.user
        club = affiliate.club if affiliate else None
        taken = player.is_questionnaire_taken
        experiences = sorted(player.experiences, key=lambda e: e.created_at, reverse=True)
        employment_type = player.employment_type or {}
        job_role = player.job_role or {}
        return success(
            "Profile fetched successfully",
            {
                "id": player.id,
                "name": user.name,
                "email": user.email,
                "userType": lower_enum(user.user_type),
                "about": player.about,
                "address": player.address,
                "country": player.country,
                "workLocations": player.work_country or [],
                "traits": player.traits or [],
                "skills": player.skills or [],
                "resume": player.resume,
                "phone": player.phone,
                "workAvailability": player.work_availability,
                "experiences": [serialize_experience(e) for e in experiences],
                "shirtNumber": player.shirt_number,
                "birthYear": player.birth_year,
                "sportsHistory": player.sports_history,
                "avatar": player.avatar,
                "banner": player.banner,
                "status": lower_enum(user.status),
                "onboardingSteps": player.onboarding_steps or [],
                "yearsOfExperience": player.years_of_experience,
                "certifications": player.certifications or [],
                "isQuestionnaireTaken": taken,
                "score": player.score if taken else None,
                "analysisResult": player.analysis_result if taken else None,
                "club": {
                    "id": club.id if club else None,
                    "name": club.name if club else None,
                    "avatar": club.avatar if club else None,
                    "banner": club.banner if club else None,
                    "preferredColor": club.preferred_color if club else None,
                },
                "industry": player.industry,
                "isApproved": affiliate.is_approved if affiliate else None,
                "employmentType": (
                    map_employment_types(employment_type)
                    if employment_type.get("primary")
                    else None
                ),
                "jobRole": lower_role_document(job_role) if job_role.get("primary") else None,
            },
        )

    @service_errors("Failed to update player profile")
    async def complete_profile(
        self,
        player_id: str,
        dto: PlayerCompleteProfileForm,
        files: Optional[dict[str, list[UploadFile]]] = None,
    ) -> dict[str, Any]:
        self.logger.info(f"Completing profile for player: {player_id}, step: {dto.step}")
        files = files or {}

        async with self.session_factory() as session:
            async with session.begin():
                player = await self._get_player(session, player_id)
                steps = OnboardingSteps(player.onboarding_steps)
                if not steps.is_pending(dto.step):
                    raise BadRequestError(f"Step {dto.step} has already been completed")

                changes: dict[str, Any] = {
                    field: getattr(dto, field)
                    for field in STEP_FIELDS.get(dto.step, ())
                    if getattr(dto, field)
                }

                if dto.step == 1 and files.get("avatar"):
                    changes.update(
                        await self.upload_files(
                            player.user_id, {"avatar": (files["avatar"][0], FileType.AVATAR)}
                        )
                    )
                elif dto.step == 2:
                    check_work_locations(dto.work_locations)
                    if dto.work_locations:
                        changes["work_country"] = dto.work_locations
                    if dto.employment_type and dto.employment_type.primary:
                        changes["employment_type"] = dto.employment_type.model_dump()
                    if dto.job_role and (dto.job_role.primary or dto.job_role.secondary):
                        changes["job_role"] = dto.job_role.model_dump()
                elif dto.step == 3:
                    check_experiences(dto.experiences)
                    changes.update(await self._step_three_documents(player, dto, files))
                    if dto.work_availability is not None:
                        changes["work_availability"] = dto.work_availability
                    session.add_all(
                        build_experience(player.id, experience)
                        for experience in dto.experiences or []
                    )
                elif dto.step == 4 and dto.security_question:
                    changes["security_question"] = {
                        "question": dto.security_question.question,
                        "answer": hash_secret(dto.security_question.answer),
                    }

                steps.mark_complete(dto.step)
                changes["onboarding_steps"] = steps.pending
                for field, value in changes.items():
                    setattr(player, field, value)

        return success(f"Step {dto.step} completed successfully", steps.status(dto.step))

    async def _step_three_documents(
        self, player: Player, dto: PlayerCompleteProfileForm, files: dict[str, list[UploadFile]]
    ) -> dict[str, Any]:
        """Resume and certifications: uploaded certifications follow the given URLs."""
        uploads: dict[str, tuple[UploadFile, FileType]] = {}
        if files.get("resume"):
            uploads["resume"] = (files["resume"][0], FileType.RESUME)
        for field in CERTIFICATION_FIELDS:
            if files.get(field):
                uploads[field] = (files[field][0], FileType.CERTIFICATION)
        urls = await self.upload_files(player.user_id, uploads)

        changes: dict[str, Any] = {}
        if "resume" in urls:
            changes["resume"] = urls["resume"]
        elif dto.resume is not None:
            changes["resume"] = dto.resume

        existing = [c for c in dto.certifications or [] if isinstance(c, str) and c.strip()]
        certifications = existing + [urls[f] for f in CERTIFICATION_FIELDS if f in urls]
        if certifications:
            changes["certifications"] = certifications
        return changes

    @service_errors("Failed to update player profile")
    async def update_profile(
        self,
        player_id: str,
        dto: PlayerUpdateProfileForm,
        files: Optional[dict[str, list[UploadFile]]] = None,
    ) -> dict[str, Any]:
        self.logger.info(f"Updating profile for player: {player_id}")
        files = files or {}

        provided = dto.model_fields_set
        check_work_locations(dto.work_locations)
        check_experiences(dto.experiences)

        changes: dict[str, Any] = {f: getattr(dto, f) for f in UPDATE_FIELDS if f in provided}
        if "work_locations" in provided:
            changes["work_country"] = dto.work_locations or []
        if "employment_type" in provided:
            changes["employment_type"] = (
                dto.employment_type.model_dump() if dto.employment_type else None
            )
        if "job_role" in provided:
            changes["job_role"] = dto.job_role.model_dump() if dto.job_role else None

        async with self.session_factory() as session:
            async with session.begin():
                player = await self._get_player(session, player_id)

                uploads: dict[str, tuple[UploadFile, FileType]] = {}
                for field, file_type in (
                    ("avatar", FileType.AVATAR),
                    ("banner", FileType.BANNER),
                    ("resume", FileType.RESUME),
                ):
                    if files.get(field):
                        uploads[field] = (files[field][0], file_type)
                for index, upload in enumerate(files.get("certifications") or []):
                    uploads[f"certifications{index}"] = (upload, FileType.CERTIFICATION)

                # optional uploads: a failed file is logged and left out
                urls = await self.upload_files(player.user_id, uploads, swallow_errors=True)
                uploaded_certs = [url for field, url in urls.items() if field.startswith("certifications")]
                for field in ("avatar", "banner", "resume"):
                    if field in urls:
                        changes[field] = urls[field]
                if uploaded_certs:
                    changes["certifications"] = (changes.get("certifications") or []) + uploaded_certs

                if not changes and dto.name is None and dto.experiences is None:
                    return success("No changes detected")

                for field, value in changes.items():
                    setattr(player, field, value)
                if dto.name is not None:
                    player.user.name = dto.name

                if dto.experiences is not None:
                    await session.execute(delete(Experience).where(Experience.player_id == player.id))
                    session.add_all(
                        build_experience(player.id, experience) for experience in dto.experiences
                    )

        return success("Player profile updated successfully")

    # ==================== Companies ===================== #
    @service_errors("Failed to fetch companies")
    async def get_companies(self, player_user_id: str, query: ListQuery) -> dict[str, Any]:
        self.logger.info("Fetching companies for player/supporter")

        stmt = (
            select(Company)
            .join(User, User.id == Company.user_id)
            .where(
                User.user_type == UserType.COMPANY,
                *where_all(search_clause(query.search, User.name)),
            )
            .options(selectinload(Company.user))
            .order_by(Company.created_at.desc())
        )

        async with self.session_factory() as session:
            companies, total = await fetch_page(session, stmt, query.page, query.limit)
            user_ids = [company.user_id for company in companies]
            clubs = {}
            if user_ids:
                affiliates = (
                    await session.execute(
                        select(Affiliate)
                        .where(
                            Affiliate.user_id.in_(user_ids),
                            Affiliate.type == AffiliateType.COMPANY,
                            Affiliate.is_approved.is_(True),
                        )
                        .options(selectinload(Affiliate.club))
                        .order_by(Affiliate.created_at)
                    )
                ).scalars().all()
                for affiliate in affiliates:
                    clubs.setdefault(affiliate.user_id, affiliate.club)
            chats = await self.chat_ids(session, user_ids, [player_user_id])

        data = [
            {
                "id": company.id,
                "userId": company.user_id,
                "name": company.user.name,
                "industry": company.industry,
                "avatar": company.avatar,
                "secondaryAvatar": company.secondary_avatar,
                "userType": lower_enum(company.user.user_type),
                "chatId": chats.get((company.user_id, player_user_id)),
                "club": club_payload(
                    clubs.get(company.user_id),
                    ("id", "name", "avatar", "banner", "preferredColor"),
                ),
            }
            for company in companies
        ]
        return success(
            "Companies fetched successfully", paginated(data, total, query.page, query.limit)
        )

    @service_errors("Failed to fetch jobs")
    async def get_jobs_by_company(
        self, player_id: str, company_id: str, query: ListQuery
    ) -> dict[str, Any]:
        self.logger.info(
            f"Fetching jobs for company {company_id} with page={query.page} and limit={query.limit}"
        )

        stmt = (
            select(Job)
            .where(
                Job.company_id == company_id,
                Job.status == JobStatus.ACTIVE,
                *where_all(
                    search_clause(
                        query.search,
                        Job.title,
                        Job.description,
                        cast(Job.type, String),
                        Job.location,
                    )
                ),
            )
            .order_by(Job.created_at.desc())
        )

        async with self.session_factory() as session:
            company = await session.scalar(
                select(Company).where(Company.id == company_id).options(selectinload(Company.user))
            )
            if not company or not company.user:
                raise NotFoundError("Company not found")
            jobs, total = await fetch_page(session, stmt, query.page, query.limit)
            job_ids = [job.id for job in jobs]
            applications = await self._applications(session, player_id, job_ids)
            bookmarked = await self._bookmarked(session, player_id, job_ids)

        data = []
        for job in jobs:
            application = applications.get(job.id)
            data.append(
                {
                    "id": job.id,
                    "type": map_employment_type(job.type),
                    "status": lower_enum(job.status),
                    "title": job.title,
                    "description": job.description,
                    "responsibilities": job.responsibilities or [],
                    "qualifications": job.qualifications or [],
                    "skills": job.skills or [],
                    "traits": job.traits or [],
                    "startDate": isoformat(job.start_date or now()),
                    "salary": salary_payload(job.salary),
                    "openToAll": bool(job.open_to_all),
                    "tags": job.tags or [],
                    "role": job.role,
                    "location": job.location,
                    "createdAt": isoformat(job.created_at),
                    "appliedDate": isoformat(application.created_at) if application else None,
                    "applicationStatus": application_label(
                        application.status if application else None
                    ),
                    "match": 0,
                    "isBookmarked": job.id in bookmarked,
                    "applicationDeadline": (
                        {"date": isoformat(job.end_date), "description": "Application deadline"}
                        if job.end_date
                        else None
                    ),
                    "company": {
                        "id": company.id,
                        "name": company.user.name,
                        "avatar": company.avatar or "",
                    },
                }
            )
        return success("Jobs fetched successfully", paginated(data, total, query.page, query.limit))

    # ==================== Job board ===================== #
    @service_errors("Failed to fetch jobs")
    async def get_all_jobs(self, player_id: str, query: PlayerJobsQuery) -> dict[str, Any]:
        self.logger.info(f"Fetching jobs for player: {player_id}")

        company_filters = where_all(
            in_clause(Company.industry, query.industry),
            in_clause(Company.country, query.regions),
        )
        stmt = (
            select(Job)
            .where(
                Job.status == JobStatus.ACTIVE,
                *where_all(
                    in_clause(Job.type, query.work_types),
                    search_clause(query.search, Job.title, Job.description),
                    Job.company_id.in_(select(Company.id).where(*company_filters))
                    if company_filters
                    else None,
                ),
            )
            .options(selectinload(Job.company).selectinload(Company.user))
            .order_by(Job.created_at.desc())
        )

        async with self.session_factory() as session:
            await self._get_player(session, player_id, "User not found")
            jobs, total = await fetch_page(session, stmt, query.page, query.limit)
            job_ids = [job.id for job in jobs]
            applications = await self._applications(session, player_id, job_ids)
            bookmarked = await self._bookmarked(session, player_id, job_ids)

        data = [
            {
                "id": job.id,
                "title": job.title,
                "type": lower_enum(job.type),
                "location": job.location,
                "company": {
                    "id": job.company.id,
                    "name": job.company.user.name or "",
                    "industry": job.company.industry,
                    "avatar": job.company.avatar or "",
                },
                "isBookmarked": job.id in bookmarked,
                "applicationStatus": application_label(
                    applications[job.id].status if job.id in applications else None
                ),
            }
            for job in jobs
        ]
        self.logger.info(f"Returned {len(data)} jobs for player {player_id}")
        return success("Jobs fetched successfully", paginated(data, total, query.page, query.limit))

    @service_errors("Failed to fetch job tracking data")
    async def get_jobs_tracking(self, player_id: str, query: JobTrackingQuery) -> dict[str, Any]:
        self.logger.info(f"Fetching job tracking for player: {player_id}")

        statuses = (
            [ApplicationStatus(s) for s in query.application_status]
            if query.application_status
            else None
        )
        applied = select(Application.id).where(
            Application.job_id == Job.id,
            Application.player_id == player_id,
            *where_all(in_clause(Application.status, statuses)),
        )
        stmt = (
            select(Job)
            .where(
                Job.status == JobStatus.ACTIVE,
                applied.exists(),
                *where_all(search_clause(query.search, Job.title, Job.description)),
            )
            .options(selectinload(Job.company).selectinload(Company.user))
            .order_by(Job.created_at.desc())
        )

        async with self.session_factory() as session:
            await self._get_player(session, player_id, "User not found")
            jobs, total = await fetch_page(session, stmt, query.page, query.limit)
            applications = await self._applications(session, player_id, [job.id for job in jobs])

        data = []
        for job in jobs:
            company = job.company
            application = applications.get(job.id)
            data.append(
                {
                    "id": job.id,
                    "title": job.title,
                    "type": lower_enum(job.type),
                    "status": lower_enum(job.status),
                    "createdAt": isoformat(job.created_at),
                    "applicationStatus": application_label(
                        application.status if application else None
                    ),
                    "company": {
                        "id": company.id,
                        "name": company.user.name,
                        "industry": company.industry,
                        "location": ", ".join(p for p in (company.address, company.country) if p),
                        "avatar": company.avatar,
                    },
                }
            )
        return success(
            "Job tracking data fetched successfully",
            paginated(data, total, query.page, query.limit),
        )

    @service_errors("Failed to fetch job")
    async def get_job(self, player_id: str, job_id: str) -> dict[str, Any]:
        self.logger.info(f"Fetching job {job_id} for player {player_id}")

        async with self.session_factory() as session:
            job = await session.scalar(
                select(Job)
                .where(Job.id == job_id)
                .options(selectinload(Job.company).selectinload(Company.user))
            )
            if not job:
                raise NotFoundError("Job not found")
            await self._get_player(session, player_id, "User not found")
            application = (await self._applications(session, player_id, [job.id])).get(job.id)
            is_bookmarked = bool(await self._bookmarked(session, player_id, [job.id]))

        company = job.company
        return success(
            "Job fetched successfully",
            {
                "id": job.id,
                "type": lower_enum(job.type),
                "status": lower_enum(job.status),
                "title": job.title,
                "description": job.description,
                "responsibilities": job.responsibilities or [],
                "qualifications": job.qualifications or [],
                "skills": job.skills or [],
                "traits": job.traits or [],
                "startDate": isoformat(job.start_date or job.created_at),
                "salary": salary_payload(job.salary),
                "openToAll": bool(job.open_to_all),
                "tags": job.tags or [],
                "role": job.role or f"{job.title}:::|:::{job.title}",
                "location": job.location,
                "createdAt": isoformat(job.created_at),
                "appliedDate": isoformat(application.created_at) if application else None,
                "applicationStatus": application_label(application.status if application else None),
                # fixed placeholder score
                "match": 90,
                "isBookmarked": is_bookmarked,
                "applicationDeadline": (
                    {"date": isoformat(job.end_date), "description": "Application deadline"}
                    if job.end_date
                    else None
                ),
                "company": {
                    "id": company.id,
                    "name": company.user.name or "",
                    "address": company.address,
                    "about": company.about,
                    "avatar": company.avatar,
                },
            },
        )

    @service_errors("Failed to update bookmark")
    async def toggle_job_bookmark(self, player_id: str, job_id: str) -> dict[str, Any]:
        self.logger.info(f"Toggling bookmark for player {player_id} on job {job_id}")

        async with self.session_factory() as session:
            async with session.begin():
                if not await session.scalar(select(Job.id).where(Job.id == job_id)):
                    raise NotFoundError("Job not found")
                if not await session.scalar(select(Player.id).where(Player.id == player_id)):
                    raise NotFoundError("Player not found")

                existing = await session.scalar(
                    select(PlayerBookmark).where(
                        PlayerBookmark.player_id == player_id, PlayerBookmark.job_id == job_id
                    )
                )
                if existing:
                    await session.delete(existing)
                    message = "Bookmark removed successfully"
                else:
                    session.add(PlayerBookmark(player_id=player_id, job_id=job_id))
                    message = "Bookmark added successfully"

        return success(message)

    @service_errors("Failed to fetch dashboard")
    async def get_dashboard(self, player_id: str) -> dict[str, Any]:
        self.logger.info(f"Fetching dashboard for player {player_id}")

        async with self.session_factory() as session:
            await self._get_player(session, player_id)
            recommendations = await session.scalar(
                select(func.count(Job.id)).where(Job.status == JobStatus.ACTIVE)
            )

        return success("Dashboard fetched successfully", {"recommendations": recommendations or 0})

    @service_errors("Failed to apply for job. Please try again later.")
    async def apply_for_job(
        self,
        player_id: str,
        job_id: str,
        dto: ApplyJobForm,
        files: Optional[dict[str, list[UploadFile]]] = None,
    ) -> dict[str, Any]:
        self.logger.info(f"Player {player_id} applying for job {job_id}")
        files = files or {}

        async with self.session_factory() as session:
            async with session.begin():
                if not await session.scalar(select(Job.id).where(Job.id == job_id)):
                    raise NotFoundError("Job not found")
                player = await self._get_player(session, player_id)

                already_applied = await session.scalar(
                    select(Application.id).where(
                        Application.job_id == job_id, Application.player_id == player.id
                    )
                )
                if already_applied:
                    raise BadRequestError("You have already applied for this job")
                if not files.get("resume"):
                    raise BadRequestError("Resume file is required")

                uploads = {"resume": (files["resume"][0], FileType.RESUME)}
                if files.get("applicationLetter"):
                    uploads["application_letter"] = (
                        files["applicationLetter"][0],
                        FileType.APPLICATION_LETTER,
                    )
                urls = await self.upload_files(player.user_id, uploads)

                application = Application(
                    job_id=job_id,
                    player_id=player.id,
                    name=dto.name,
                    email=dto.email,
                    phone=dto.phone,
                    zip=dto.zip,
                    legally_authorized=dto.legally_authorized,
                    visa_sponsorship=dto.visa_sponsorship,
                    years_of_experience=dto.years_of_experience,
                    resume=urls["resume"],
                    application_letter=urls.get("application_letter"),
                    status=ApplicationStatus.APPLIED,
                )
                session.add(application)

        return success("Application created successfully", {"applicationId": application.id})

    # ==================== Public profiles ===================== #
    @service_errors("Failed to fetch players")
    async def get_public_players(self, query: ListQuery) -> dict[str, Any]:
        stmt = (
            select(Player)
            .join(User, User.id == Player.user_id)
            .where(*where_all(search_clause(query.search, User.name)))
            .options(selectinload(Player.user))
            .order_by(Player.created_at.desc())
        )

        async with self.session_factory() as session:
            players, total = await fetch_page(session, stmt, query.page, query.limit)

        data = [
            {
                "id": player.id,
                "name": player.user.name or "",
                "email": player.user.email,
                "about": player.about,
                "address": player.address,
                "workLocations": player.work_country or [],
                "traits": player.traits or [],
                "skills": player.skills or [],
                "avatar": player.avatar,
            }
            for player in players
        ]
        return success("Players fetched successfully", paginated(data, total, query.page, query.limit))

    @service_errors("Failed to fetch players list")
    async def get_public_players_list(self, query: ListQuery) -> dict[str, Any]:
        """Ids and names only, with pagination fields at the top level."""
        stmt = (
            select(Player).options(selectinload(Player.user)).order_by(Player.created_at.desc())
        )

        async with self.session_factory() as session:
            players, total = await fetch_page(session, stmt, query.page, query.limit)

        data = [{"id": player.id, "name": player.user.name or ""} for player in players]
        return success(
            "Players list fetched successfully",
            data,
            **pagination_meta(total, query.page, query.limit),
        )

    @service_errors("Failed to fetch public profile")
    async def get_public_profile(
        self, player_id: str, viewer_company_user_id: Optional[str] = None
    ) -> dict[str, Any]:
        self.logger.info(f"Fetching public profile for player: {player_id}")

        async with self.session_factory() as session:
            player = await session.scalar(
                select(Player)
                .where(Player.id == player_id)
                .options(selectinload(Player.user), selectinload(Player.experiences))
            )
            if not player:
                raise NotFoundError("Player not found")
            affiliate = await session.scalar(
                select(Affiliate)
                .where(Affiliate.user_id == player.user_id, Affiliate.is_approved.is_(True))
                .options(selectinload(Affiliate.club))
                .limit(1)
            )
            chats = (
                await self.chat_ids(session, [viewer_company_user_id], [player.user_id])
                if viewer_company_user_id
                else {}
            )

        user = player.user
        job_role = player.job_role or {}
        return success(
            "Profile fetched successfully",
            {
                "id": player.id,
                "userId": user.id,
                "name": user.name,
                "email": user.email,
                "userType": lower_enum(user.user_type),
                "about": player.about,
                "address": player.address,
                "workAvailability": player.work_availability,
                "workLocations": player.work_country or [],
                "employmentType": player.employment_type,
                "traits": player.traits or [],
                "skills": player.skills or [],
                "resume": player.resume,
                "phone": player.phone,
                "experiences": [serialize_experience(e) for e in player.experiences],
                "shirtNumber": player.shirt_number,
                "birthYear": player.birth_year,
                "sportsHistory": player.sports_history,
                "avatar": player.avatar,
                "status": lower_enum(user.status),
                "yearsOfExperience": player.years_of_experience,
                "certifications": player.certifications or [],
                "score": player.score or 0,
                "chatId": chats.get((viewer_company_user_id, player.user_id)),
                "club": club_payload(
                    affiliate.club if affiliate else None,
                    ("id", "avatar", "banner", "preferredColor"),
                )
                or {},
                "industry": player.industry or "",
                "jobRole": job_role if job_role.get("primary") else None,
            },
        )

    async def track_player_view(self, company_id: str, player_id: str) -> None:
        """Record ``player_id`` as the company's most recently viewed candidate."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    company = await session.get(Company, company_id)
                    if company is None:
                        return
                    company.recently_viewed_players = push_recent(
                        company.recently_viewed_players, player_id
                    )
        except Exception as e:
            self.logger.error(f"Failed to track player view for company {company_id}: {e}")
