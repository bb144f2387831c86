"""Administration: company directory, invitations and account removal."""

from typing import Any, Optional
from urllib.parse import urlencode

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import selectinload

from api.schemas.admin import AdminCompaniesQuery, InviteCompaniesRequest
from api.schemas.common import ListQuery
from api.services.base import BaseService, success
from core.config import settings
from core.exceptions import NotFoundError, service_errors
from core.integrations.email import EmailService, EmailTemplates, get_email_service
from core.query import fetch_page, paginated, search_clause, where_all
from core.shaping import club_payload, lower_enum
from database.models.companies import Company, Task
from database.models.jobs import Application, Job, JobStatus, PlayerBookmark, Shortlisted
from database.models.players import Experience, Player
from database.models.users import (
    Affiliate,
    AffiliateStatus,
    AffiliateType,
    Chat,
    Club,
    Notification,
    User,
)

ACCOUNT_EXISTS = "An account with this email already exists."
ALREADY_INVITED = "An invitation has already been sent to this email for this club."
INVITE_FAILED = "Failed to send invitation due to system error"


class InvitationError(Exception):
    """Raised when an invitation email could not be delivered."""


class AdminService(BaseService):
    """Operations reserved for ADMIN accounts."""

    def __init__(self, *args, email_service: Optional[EmailService] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._email_service = email_service

    @property
    def email_service(self) -> EmailService:
        if self._email_service is None:
            self._email_service = get_email_service()
        return self._email_service

    async def _approved_clubs(
        self, session, user_ids: list[str], types: list[AffiliateType]
    ) -> dict[str, Club]:
        """First approved club per user among affiliations of ``types``."""
        if not user_ids:
            return {}
        affiliates = (
            await session.execute(
                select(Affiliate)
                .where(
                    Affiliate.user_id.in_(user_ids),
                    Affiliate.type.in_(types),
                    Affiliate.is_approved.is_(True),
                )
                .options(selectinload(Affiliate.club))
                .order_by(Affiliate.created_at)
            )
        ).scalars().all()
        clubs: dict[str, Club] = {}
        for affiliate in affiliates:
            clubs.setdefault(affiliate.user_id, affiliate.club)
        return clubs

    # ==================== Companies ===================== #
    @service_errors("Failed to fetch companies. Please try again later.")
    async def get_companies(self, query: AdminCompaniesQuery) -> dict[str, Any]:
        self.logger.info(f"Fetching companies page={query.page} limit={query.limit}")

        approved = select(Affiliate.id).where(
            Affiliate.user_id == Company.user_id,
            Affiliate.is_approved.is_(True),
            Affiliate.type == AffiliateType.COMPANY,
        )
        stmt = (
            select(Company)
            .join(User, User.id == Company.user_id)
            .where(
                approved.exists(),
                User.name.is_not(None),
                User.status == query.status,
                *where_all(search_clause(query.search, User.name)),
            )
            .options(selectinload(Company.user))
            .order_by(Company.created_at.desc())
        )

        async with self.session_factory() as session:
            companies, total = await fetch_page(session, stmt, query.page, query.limit)
            clubs = await self._approved_clubs(
                session, [c.user_id for c in companies], [AffiliateType.COMPANY]
            )

        data = [
            {
                "id": company.id,
                "name": company.user.name,
                "club": club_payload(clubs.get(company.user_id)),
            }
            for company in companies
        ]
        self.logger.info(f"Returned {len(data)} companies")
        return success(
            "Companies fetched successfully", paginated(data, total, query.page, query.limit)
        )

    @service_errors("Failed to process company invitations. Please try again later.")
    async def invite_companies(self, dto: InviteCompaniesRequest) -> dict[str, Any]:
        """
        Invite companies to a club by email.

        Each address is handled on its own: an address that already has an
        account or an invitation is skipped with a reason, and a failure on
        one address does not stop the others.
        """
        self.logger.info(f"Inviting companies for club {dto.club_id}")

        async with self.session_factory() as session:
            club = await session.get(Club, dto.club_id)
        if not club:
            raise NotFoundError("Club not found")

        processed: list[str] = []
        skipped: list[dict[str, str]] = []
        for email in dto.emails:
            try:
                reason = await self._invite_one(club, email)
            except Exception as e:
                self.logger.error(f"Failed to process invitation for {email}: {e}")
                reason = INVITE_FAILED

            if reason:
                skipped.append({"email": email, "reason": reason})
            else:
                processed.append(email)

        self.logger.info(f"Processed {len(processed)} invites, skipped {len(skipped)}")
        return success(
            "Company invitation(s) sent successfully.",
            {"processedEmails": processed, "skippedEmails": skipped},
        )

    async def _invite_one(self, club: Club, email: str) -> Optional[str]:
        """Create the invitation and send the email; returns a skip reason or ``None``."""
        async with self.session_factory() as session:
            async with session.begin():
                if await session.scalar(select(User.id).where(User.email == email)):
                    return ACCOUNT_EXISTS
                if await session.scalar(
                    select(Affiliate.id).where(
                        Affiliate.email == email,
                        Affiliate.club_id == club.id,
                        Affiliate.type == AffiliateType.COMPANY,
                    )
                ):
                    return ALREADY_INVITED

                session.add(
                    Affiliate(
                        type=AffiliateType.COMPANY,
                        email=email,
                        club_id=club.id,
                        status=AffiliateStatus.PENDING,
                        ref_code=club.ref_code,
                        by_admin=True,
                        is_approved=True,
                    )
                )
                await session.flush()

                params = urlencode({"ref": club.ref_code or "", "email": email})
                template = EmailTemplates.company_invitation(
                    club.name, f"{settings.frontend_url}/signup/company?{params}"
                )
                # an undelivered invitation rolls back its affiliate row
                if not await self.email_service.send_email_async(
                    email, template["subject"], template["body"], html=template["html"]
                ):
                    raise InvitationError(f"Invitation email to {email} was not sent")
        return None

    @service_errors("Failed to delete company. Please try again later.")
    async def delete_company(self, company_id: str) -> dict[str, Any]:
        self.logger.info(f"Deleting company: {company_id}")

        async with self.session_factory() as session:
            async with session.begin():
                company = await session.get(Company, company_id)
                if not company:
                    raise NotFoundError("Company not found")
                user_id = company.user_id

                job_ids = select(Job.id).where(Job.company_id == company_id)
                for model in (Shortlisted, Application, PlayerBookmark):
                    await session.execute(delete(model).where(model.job_id.in_(job_ids)))
                await session.execute(delete(Job).where(Job.company_id == company_id))
                await session.execute(delete(Task).where(Task.company_id == company_id))
                await session.execute(delete(Notification).where(Notification.user_id == user_id))
                await session.execute(delete(Affiliate).where(Affiliate.user_id == user_id))
                await session.execute(delete(Chat).where(Chat.company_user_id == user_id))
                await session.execute(delete(Company).where(Company.id == company_id))
                await session.execute(delete(User).where(User.id == user_id))

        self.logger.info(f"Successfully deleted company: {company_id}")
        return success("Company and all related data deleted successfully")

    @service_errors("Failed to delete player. Please try again later.")
    async def delete_player(self, player_id: str) -> dict[str, Any]:
        self.logger.info(f"Deleting player: {player_id}")

        async with self.session_factory() as session:
            async with session.begin():
                player = await session.get(Player, player_id)
                if not player:
                    raise NotFoundError("Player not found")
                user_id = player.user_id

                for model in (Application, Shortlisted, PlayerBookmark, Experience):
                    await session.execute(delete(model).where(model.player_id == player_id))
                await session.execute(delete(Notification).where(Notification.user_id == user_id))
                await session.execute(delete(Affiliate).where(Affiliate.user_id == user_id))
                await session.execute(delete(Chat).where(Chat.player_user_id == user_id))
                await session.execute(delete(Player).where(Player.id == player_id))
                await session.execute(delete(User).where(User.id == user_id))

        self.logger.info(f"Successfully deleted player: {player_id}")
        return success("Player and all related data deleted successfully")

    @service_errors("Failed to fetch hired players")
    async def get_company_hired_players(self, company_id: str, query: ListQuery) -> dict[str, Any]:
        """Candidates attached to the company's active jobs, with their application status."""
        self.logger.info(f"Fetching hired players for company: {company_id}")

        stmt = (
            select(Shortlisted)
            .join(Job, Job.id == Shortlisted.job_id)
            .where(Job.company_id == company_id, Job.status == JobStatus.ACTIVE)
            .options(selectinload(Shortlisted.player).selectinload(Player.user))
            .order_by(Shortlisted.created_at.desc())
        )

        async with self.session_factory() as session:
            if not await session.get(Company, company_id):
                raise NotFoundError("Company not found")
            rows, total = await fetch_page(session, stmt, query.page, query.limit)

            statuses: dict[tuple[str, str], Any] = {}
            if rows:
                applications = await session.execute(
                    select(Application.player_id, Application.job_id, Application.status).where(
                        or_(
                            *(
                                (Application.player_id == row.player_id)
                                & (Application.job_id == row.job_id)
                                for row in rows
                            )
                        )
                    )
                )
                statuses = {(p, j): status for p, j, status in applications.all()}
            clubs = await self._approved_clubs(
                session,
                [row.player.user_id for row in rows],
                [AffiliateType.PLAYER, AffiliateType.SUPPORTER],
            )

        data = [
            {
                "id": row.player.id,
                "name": row.player.user.name,
                "affiliateType": lower_enum(row.player.user.user_type),
                "club": club_payload(clubs.get(row.player.user_id)),
                "status": lower_enum(statuses.get((row.player_id, row.job_id))),
            }
            for row in rows
        ]
        return success(
            "Fetched hired players successfully", paginated(data, total, query.page, query.limit)
        )
