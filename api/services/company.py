"""Company profile, onboarding, dashboard, candidate discovery and questionnaire."""

from typing import Any, Optional

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from api.schemas.company import (
    CompanyCompleteProfileForm,
    CompanyUpdateProfileForm,
    GetPlayersQuery,
    PostPartnerAnswersRequest,
    RegionSchema,
)
from api.services.base import BaseService, push_recent, success
from core.cache import redis_cache
from core.exceptions import (
    BadRequestError,
    NotFoundError,
    RequestTimeoutError,
    service_errors,
)
from core.integrations.questionnaire import PartnerQuestionnaireClient
from core.onboarding import OnboardingSteps
from core.query import PostFilter, fetch_page, in_clause, paginated, search_clause, where_all
from core.shaping import club_payload, lower_enum
from core.storage.s3 import FileType
from core.utils.datetime import isoformat
from database.models.companies import Company, Task, TaskStatus
from database.models.jobs import Application, Job, JobStatus
from database.models.players import Player
from database.models.users import Affiliate, AffiliateType, Club, User

MAX_SECONDARY_REGIONS = 4
SCORE_TIMEOUT_MESSAGE = (
    "Could not retrieve test score in time. It will be updated in your profile later."
)

# multipart field -> (column, storage slot)
COMPANY_UPLOADS = {
    "avatar": ("avatar", FileType.AVATAR),
    "secondaryAvatar": ("secondary_avatar", FileType.SECONDARY_AVATAR),
    "banner": ("banner", FileType.BANNER),
}
STEP_ONE_FIELDS = ("industry", "about", "country", "address", "tagline")
UPDATE_TEXT_FIELDS = ("about", "country", "industry", "address", "tagline", "focus")


def validate_region(region: Optional[RegionSchema]) -> Optional[dict[str, Any]]:
    if region is None:
        return None
    if len(region.secondary) > MAX_SECONDARY_REGIONS:
        raise BadRequestError("Secondary regions cannot have more than 4 values")
    return region.model_dump()


class CompanyService(BaseService):
    """Everything a company does with its own profile."""

    def __init__(self, *args, questionnaire: Optional[PartnerQuestionnaireClient] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._questionnaire = questionnaire

    @property
    def questionnaire(self) -> PartnerQuestionnaireClient:
        if self._questionnaire is None:
            self._questionnaire = PartnerQuestionnaireClient(cache=redis_cache)
        return self._questionnaire

    async def _get_company(self, session, company_id: str) -> Company:
        company = await session.scalar(
            select(Company).where(Company.id == company_id).options(selectinload(Company.user))
        )
        if not company:
            raise NotFoundError("Company not found")
        return company

    async def _affiliate_club(self, session, user_id: str) -> Optional[Club]:
        affiliate = await session.scalar(
            select(Affiliate)
            .where(Affiliate.user_id == user_id)
            .options(selectinload(Affiliate.club))
            .order_by(Affiliate.created_at)
            .limit(1)
        )
        return affiliate.club if affiliate else None

    async def _upload_media(
        self, user_id: str, files: Optional[dict[str, list[UploadFile]]]
    ) -> dict[str, str]:
        """Upload the provided media files; returns ``{column: url}``."""
        uploads = {
            column: (files[field][0], file_type)
            for field, (column, file_type) in COMPANY_UPLOADS.items()
            if files and files.get(field)
        }
        return await self.upload_files(user_id, uploads)

    # ==================== Profile ===================== #
    @service_errors("Failed to fetch company profile")
    async def get_profile(self, company_id: str) -> dict[str, Any]:
        self.logger.info(f"Fetching profile for company: {company_id}")

        async with self.session_factory() as session:
            company = await self._get_company(session, company_id)
            affiliate = await session.scalar(
                select(Affiliate)
                .where(Affiliate.user_id == company.user_id)
                .options(selectinload(Affiliate.club))
                .limit(1)
            )

        user = company.user
        taken = company.is_questionnaire_taken
        club = affiliate.club if affiliate else None
        return success(
            "Company profile fetched successfully",
            {
                "id": company.id,
                "name": user.name,
                "email": user.email,
                "availability": company.availability,
                "userType": lower_enum(user.user_type),
                "region": company.region,
                "address": company.address,
                "onboardingSteps": company.onboarding_steps or [],
                "about": company.about,
                "avatar": company.avatar,
                "secondaryAvatar": company.secondary_avatar,
                "banner": company.banner,
                "tagline": company.tagline,
                "industry": company.industry,
                "focus": company.focus,
                "status": lower_enum(user.status),
                "preferredClubs": company.preferred_clubs or [],
                "country": company.country,
                "isApproved": affiliate.is_approved if affiliate else None,
                "club": club_payload(
                    club, ("id", "name", "avatar", "preferredColor", "banner")
                )
                or {},
                "isQuestionnaireTaken": taken,
                "score": company.score if taken else None,
                "analysisResult": company.analysis_result if taken else None,
            },
        )

    @service_errors("Failed to update company profile")
    async def complete_profile(
        self,
        company_id: str,
        dto: CompanyCompleteProfileForm,
        files: Optional[dict[str, list[UploadFile]]] = None,
    ) -> dict[str, Any]:
        self.logger.info(f"Completing profile for company: {company_id}, step: {dto.step}")

        changes: dict[str, Any] = {}
        if dto.step == 1:
            for field in STEP_ONE_FIELDS:
                value = getattr(dto, field)
                if value:
                    changes[field] = value
            region = validate_region(dto.region)
            if region is not None:
                changes["region"] = region
        else:
            self.logger.warning(f"No profile data handled for company step {dto.step}")

        async with self.session_factory() as session:
            async with session.begin():
                company = await self._get_company(session, company_id)
                changes.update(await self._upload_media(company.user_id, files))

                # a step that is no longer pending is accepted again without error
                steps = OnboardingSteps(company.onboarding_steps).mark_complete(dto.step)
                changes["onboarding_steps"] = steps.pending
                for field, value in changes.items():
                    setattr(company, field, value)

        return success("Profile onboarding completed successfully", steps.status(dto.step))

    @service_errors("Failed to update company profile")
    async def update_profile(
        self,
        company_id: str,
        dto: CompanyUpdateProfileForm,
        files: Optional[dict[str, list[UploadFile]]] = None,
    ) -> dict[str, Any]:
        self.logger.info(f"Updating profile for company: {company_id}")

        provided = dto.model_fields_set
        changes: dict[str, Any] = {
            field: getattr(dto, field) for field in UPDATE_TEXT_FIELDS if field in provided
        }
        if "preferred_clubs" in provided and dto.preferred_clubs is not None:
            changes["preferred_clubs"] = dto.preferred_clubs
        region = validate_region(dto.region)
        if region is not None:
            changes["region"] = region

        async with self.session_factory() as session:
            async with session.begin():
                company = await self._get_company(session, company_id)
                changes.update(await self._upload_media(company.user_id, files))

                if not changes and dto.name is None:
                    return success("No changes detected")

                for field, value in changes.items():
                    setattr(company, field, value)
                if dto.name is not None:
                    company.user.name = dto.name

        return success("Company profile updated successfully")

    @service_errors("Failed to fetch dashboard data")
    async def get_dashboard(self, company_id: str) -> dict[str, Any]:
        self.logger.info(f"Fetching dashboard data for company: {company_id}")

        active_jobs = select(Job.id).where(
            Job.company_id == company_id, Job.status == JobStatus.ACTIVE
        )
        async with self.session_factory() as session:
            active_count = await session.scalar(
                select(func.count()).select_from(active_jobs.subquery())
            )
            applications = (
                await session.execute(
                    select(Application)
                    .where(Application.job_id.in_(active_jobs))
                    .options(selectinload(Application.job))
                    .order_by(Application.created_at.desc())
                    .limit(10)
                )
            ).scalars().all()
            pending_tasks = await session.scalar(
                select(func.count(Task.id)).where(
                    Task.company_id == company_id, Task.status == TaskStatus.TODO
                )
            )

        return success(
            "Dashboard data fetched successfully",
            {
                "pendingTasks": pending_tasks or 0,
                "recruitmentGoals": {"total": 0, "achieved": 0},
                "metrics": [
                    {
                        "accessorKey": "jobsPosting",
                        "value": active_count or 0,
                        "title": "Active Job Posting",
                    },
                    {
                        "accessorKey": "newApplicants",
                        "value": len(applications),
                        "title": "New Applications",
                    },
                ],
                "applicants": [
                    {
                        "id": app.id,
                        "name": app.name,
                        "application": app.job.title,
                        "status": lower_enum(app.status),
                        "date": isoformat(app.created_at),
                    }
                    for app in applications
                ],
            },
        )

    # ==================== Candidate discovery ===================== #
    @service_errors("Failed to fetch players")
    async def get_players(
        self, company_id: str, company_user_id: str, query: GetPlayersQuery
    ) -> dict[str, Any]:
        self.logger.info(f"Fetching players for company: {company_id}")

        candidate_types = [
            AffiliateType(value)
            for value in query.candidates or (AffiliateType.PLAYER.value, AffiliateType.SUPPORTER.value)
        ]
        approved = select(Affiliate.id).where(
            Affiliate.user_id == Player.user_id,
            Affiliate.is_approved.is_(True),
            Affiliate.type.in_(candidate_types),
        )
        stmt = (
            select(Player)
            .join(User, User.id == Player.user_id)
            .where(
                approved.exists(),
                *where_all(
                    search_clause(query.search, User.name, Player.about),
                    in_clause(Player.club_id, query.clubs),
                ),
            )
            .options(selectinload(Player.user), selectinload(Player.club))
            .order_by(Player.created_at.desc())
        )
        if query.club_types:
            stmt = stmt.join(Club, Club.id == Player.club_id).where(
                Club.category.in_(query.club_types)
            )

        post_filter = PostFilter(
            regions=query.regions, work_types=query.work_types, industries=query.industry
        )
        async with self.session_factory() as session:
            players, total = await fetch_page(session, stmt, query.page, query.limit)
            players = post_filter.apply(players)
            chats = await self.chat_ids(
                session, [company_user_id], [player.user_id for player in players]
            )

        data = [
            {
                "id": player.id,
                "userId": player.user.id,
                "name": player.user.name,
                "email": player.user.email,
                "userType": lower_enum(player.user.user_type),
                "avatar": player.avatar,
                "shirtNumber": player.shirt_number,
                "about": player.about,
                "sportsHistory": player.sports_history,
                "industry": player.industry,
                "jobRole": player.job_role,
                "chatId": chats.get((company_user_id, player.user_id)),
                "club": club_payload(
                    player.club,
                    ("id", "name", "avatar", "preferredColor", "banner", "category"),
                ),
            }
            for player in players
        ]
        return success(
            "Players retrieved successfully", paginated(data, total, query.page, query.limit)
        )

    # ==================== Public profile ===================== #
    @service_errors("Failed to fetch company profile")
    async def get_public_profile(
        self, company_id: str, viewer_user_id: Optional[str] = None
    ) -> dict[str, Any]:
        """
        Company profile as seen by anyone.

        ``viewer_user_id`` is the signed-in player or supporter, used to
        expose an open chat with the company.
        """
        self.logger.info(f"Fetching public profile for company: {company_id}")

        async with self.session_factory() as session:
            company = await self._get_company(session, company_id)
            club = await self._affiliate_club(session, company.user_id)
            chats = (
                await self.chat_ids(session, [company.user_id], [viewer_user_id])
                if viewer_user_id
                else {}
            )

        user = company.user
        return success(
            "Company profile fetched successfully",
            {
                "id": company.id,
                "userId": user.id,
                "name": user.name or "",
                "email": user.email,
                "userType": lower_enum(user.user_type),
                "about": company.about,
                "avatar": company.avatar,
                "address": company.address,
                "region": company.region,
                "tagline": company.tagline,
                "industry": company.industry,
                "focus": company.focus,
                "status": lower_enum(user.status),
                "preferredClubs": company.preferred_clubs or [],
                "score": company.score,
                "country": company.country,
                "availability": company.availability,
                "secondaryAvatar": company.secondary_avatar,
                "chatId": chats.get((company.user_id, viewer_user_id)),
                "club": club_payload(club, ("avatar", "preferredColor", "banner")) or {},
            },
        )

    async def track_company_view(self, player_id: str, company_id: str) -> None:
        """Record ``company_id`` as the player's most recently viewed company."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    player = await session.get(Player, player_id)
                    if player is None:
                        return
                    player.recently_viewed_companies = push_recent(
                        player.recently_viewed_companies, company_id
                    )
        except Exception as e:
            self.logger.error(f"Failed to track company view for player {player_id}: {e}")

    # ==================== Questionnaire ===================== #
    @service_errors("Failed to fetch questions")
    async def get_partner_questions(self) -> dict[str, Any]:
        self.logger.info("Fetching partner questions from external webhook")
        questions = await self.questionnaire.get_questions()
        return success("Questions fetched successfully", questions)

    @service_errors("Failed to submit answers")
    async def post_partner_answers(
        self, company_id: str, dto: PostPartnerAnswersRequest
    ) -> dict[str, Any]:
        """
        Submit answers, then wait for the partner's score.

        The request blocks while the score is polled.
        """
        self.logger.info(f"Submitting partner answers for company: {company_id}")

        if not await self.questionnaire.submit_answers(company_id, dto.answers):
            raise BadRequestError("Failed to submit answers")

        score = await self.questionnaire.poll_score(company_id)
        if score is None:
            raise RequestTimeoutError(SCORE_TIMEOUT_MESSAGE)

        async with self.session_factory() as session:
            async with session.begin():
                company = await self._get_company(session, company_id)
                try:
                    company.score = float(score)
                except (TypeError, ValueError):
                    self.logger.warning(f"Non-numeric score for company {company_id}: {score!r}")
                company.is_questionnaire_taken = True

        return success("Submitted successfully", {"score": score})
