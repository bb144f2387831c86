"""Tests for administration operations."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from api.schemas.admin import AdminCompaniesQuery, InviteCompaniesRequest
from api.schemas.common import ListQuery
from api.services.admin import (
    ACCOUNT_EXISTS,
    ALREADY_INVITED,
    INVITE_FAILED,
    AdminService,
)
from core.exceptions import NotFoundError
from core.integrations.email import EmailService, EmailTemplates
from database.models.companies import Company, Task
from database.models.jobs import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    PlayerBookmark,
    Shortlisted,
    ShortlistStatus,
)
from database.models.players import Experience, Player
from database.models.users import (
    Affiliate,
    AffiliateType,
    Chat,
    Notification,
    User,
    UserStatus,
    UserType,
)


@pytest.fixture
def email_service():
    fake = AsyncMock()
    fake.send_email_async.return_value = True
    return fake


@pytest.fixture
def service(session_factory, email_service):
    return AdminService(session_factory=session_factory, email_service=email_service)


async def count(session_factory, model, *criteria):
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model).where(*criteria))


class TestGetCompanies:

    @pytest.mark.asyncio
    async def test_only_approved_with_status(self, service, seed):
        club = await seed.club(name="FC Admin")
        approved = await seed.company(name="Approved", club=club)
        await seed.company(name="No club")
        suspended = await seed.company(name="Suspended", club=club)
        async with seed.session_factory() as session:
            user = await session.get(User, suspended.user_id)
            user.status = UserStatus.SUSPENDED
            await session.commit()

        result = await service.get_companies(AdminCompaniesQuery())

        assert result["data"]["data"] == [
            {
                "id": approved.id,
                "name": "Approved",
                "club": {"id": club.id, "name": "FC Admin", "avatar": None},
            }
        ]

        suspended_only = await service.get_companies(
            AdminCompaniesQuery.model_validate({"status": "suspended"})
        )
        assert [row["name"] for row in suspended_only["data"]["data"]] == ["Suspended"]


class TestInviteCompanies:

    @pytest.mark.asyncio
    async def test_invites_and_skips(self, service, seed, session_factory, email_service):
        club = await seed.club(ref_code="CLUB1")
        existing = await seed.company()
        async with session_factory() as session:
            existing_email = (await session.get(User, existing.user_id)).email
        await seed.add(
            Affiliate(club_id=club.id, email="invited@example.com", type=AffiliateType.COMPANY)
        )
        dto = InviteCompaniesRequest.model_validate(
            {
                "clubId": club.id,
                "emails": [existing_email, "invited@example.com", "new@example.com"],
            }
        )

        result = await service.invite_companies(dto)

        assert result["data"] == {
            "processedEmails": ["new@example.com"],
            "skippedEmails": [
                {"email": existing_email, "reason": ACCOUNT_EXISTS},
                {"email": "invited@example.com", "reason": ALREADY_INVITED},
            ],
        }
        email_service.send_email_async.assert_awaited_once()
        to_email, subject, body = email_service.send_email_async.await_args.args
        assert to_email == "new@example.com"
        assert "ref=CLUB1" in body
        assert "email=new%40example.com" in body
        assert await count(
            session_factory, Affiliate, Affiliate.email == "new@example.com", Affiliate.by_admin
        ) == 1

    @pytest.mark.asyncio
    async def test_failed_email_rolls_back(self, service, seed, session_factory, email_service):
        club = await seed.club()
        email_service.send_email_async.return_value = False

        result = await service.invite_companies(
            InviteCompaniesRequest(club_id=club.id, emails=["lost@example.com"])
        )

        assert result["data"]["skippedEmails"] == [
            {"email": "lost@example.com", "reason": INVITE_FAILED}
        ]
        assert await count(session_factory, Affiliate, Affiliate.email == "lost@example.com") == 0

    @pytest.mark.asyncio
    async def test_unknown_club(self, service):
        with pytest.raises(NotFoundError, match="Club not found"):
            await service.invite_companies(
                InviteCompaniesRequest(club_id="missing", emails=["a@example.com"])
            )

    def test_emails_are_validated_and_deduplicated(self):
        dto = InviteCompaniesRequest.model_validate(
            {"clubId": "c", "emails": '["A@example.com", "a@example.com"]'}
        )
        assert dto.emails == ["a@example.com"]
        with pytest.raises(ValidationError):
            InviteCompaniesRequest.model_validate({"clubId": "c", "emails": ["not-an-email"]})


class TestDeleteAccounts:

    @pytest.mark.asyncio
    async def test_delete_company_cascades(self, service, seed, session_factory):
        club = await seed.club()
        company = await seed.company(club=club)
        player = await seed.player()
        job = await seed.job(company)
        await seed.add(
            Shortlisted(job_id=job.id, player_id=player.id),
            Application(job_id=job.id, player_id=player.id),
            PlayerBookmark(job_id=job.id, player_id=player.id),
            Task(company_id=company.id, title="Review"),
            Notification(user_id=company.user_id, title="Hello"),
            Chat(company_user_id=company.user_id, player_user_id=player.user_id),
        )

        result = await service.delete_company(company.id)

        assert result["message"] == "Company and all related data deleted successfully"
        for model in (Company, Job, Shortlisted, Application, PlayerBookmark, Task, Chat, Notification):
            assert await count(session_factory, model) == 0
        assert await count(session_factory, Affiliate) == 0
        assert await count(session_factory, User, User.id == company.user_id) == 0
        assert await count(session_factory, Player) == 1

    @pytest.mark.asyncio
    async def test_delete_player_cascades(self, service, seed, session_factory):
        company = await seed.company()
        player = await seed.player(user_type=UserType.SUPPORTER)
        job = await seed.job(company)
        await seed.add(
            Shortlisted(job_id=job.id, player_id=player.id),
            Application(job_id=job.id, player_id=player.id),
            Experience(player_id=player.id, title="Coach", company="FC"),
            Chat(company_user_id=company.user_id, player_user_id=player.user_id),
        )

        await service.delete_player(player.id)

        for model in (Player, Shortlisted, Application, Experience, Chat):
            assert await count(session_factory, model) == 0
        assert await count(session_factory, Job) == 1

    @pytest.mark.asyncio
    async def test_delete_missing(self, service):
        with pytest.raises(NotFoundError, match="Company not found"):
            await service.delete_company("missing")
        with pytest.raises(NotFoundError, match="Player not found"):
            await service.delete_player("missing")


class TestCompanyHiredPlayers:

    @pytest.mark.asyncio
    async def test_with_application_status(self, service, seed):
        club = await seed.club()
        company = await seed.company()
        active = await seed.job(company)
        inactive = await seed.job(company, status=JobStatus.INACTIVE)
        player = await seed.player(name="Ana", club=club)
        other = await seed.player(name="Ben")
        await seed.add(
            Shortlisted(job_id=active.id, player_id=player.id, status=ShortlistStatus.HIRED),
            Shortlisted(job_id=inactive.id, player_id=other.id),
            Application(
                job_id=active.id, player_id=player.id, status=ApplicationStatus.HIRED
            ),
        )

        result = await service.get_company_hired_players(company.id, ListQuery())

        assert result["data"]["data"] == [
            {
                "id": player.id,
                "name": "Ana",
                "affiliateType": "player",
                "club": {"id": club.id, "name": club.name, "avatar": None},
                "status": "hired",
            }
        ]

    @pytest.mark.asyncio
    async def test_unknown_company(self, service):
        with pytest.raises(NotFoundError):
            await service.get_company_hired_players("missing", ListQuery())


class TestEmailService:

    def test_send_email_uses_smtp(self):
        service = EmailService(
            smtp_host="smtp.test",
            smtp_port=587,
            smtp_user="user",
            smtp_password="pass",
            from_email="noreply@test",
            from_name="ClubHire",
        )
        with patch("core.integrations.email.smtplib.SMTP") as smtp:
            server = MagicMock()
            smtp.return_value.__enter__.return_value = server

            assert service.send_email("a@example.com", "Hi", "<p>Hi</p>", html=True) is True

        smtp.assert_called_once_with("smtp.test", 587)
        server.login.assert_called_once_with("user", "pass")
        server.send_message.assert_called_once()

    def test_send_failure_returns_false(self):
        service = EmailService(smtp_host="smtp.test", smtp_port=587)
        with patch("core.integrations.email.smtplib.SMTP", side_effect=OSError("refused")):
            assert service.send_email("a@example.com", "Hi", "body") is False

    def test_invitation_escapes_club_name(self):
        template = EmailTemplates.company_invitation(
            "<b>Rovers</b> & Co", "https://app.test/signup?ref=R1&email=a%40b.com"
        )

        assert "&lt;b&gt;Rovers&lt;/b&gt; &amp; Co would like" in template["body"]
        assert "<b>Rovers</b>" not in template["body"]
        assert 'href="https://app.test/signup?ref=R1&amp;email=a%40b.com"' in template["body"]
