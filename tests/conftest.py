"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time; these defaults must exist before any
# application module is imported by a test module.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_S3_BUCKET", "test-bucket")
os.environ.setdefault("JSON_LOGS", "false")

from io import BytesIO  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from starlette.datastructures import Headers, UploadFile  # noqa: E402

import database.models  # noqa: E402,F401
from database.engine import Base  # noqa: E402
from database.models.companies import Company  # noqa: E402
from database.models.jobs import Job, JobStatus  # noqa: E402
from database.models.players import Player  # noqa: E402
from database.models.users import (  # noqa: E402
    Affiliate,
    AffiliateStatus,
    AffiliateType,
    Club,
    User,
    UserType,
)


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test, shared across sessions via StaticPool."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def storage():
    """Storage double returning predictable public URLs."""
    fake = AsyncMock()

    async def upload_file(upload, owner_id, file_type):
        key = f"Public/users/{owner_id}/{file_type.value}/{upload.filename}"
        return {
            "success": True,
            "s3Key": key,
            "publicUrl": f"https://cdn.test/{key}",
            "originalName": upload.filename,
        }

    fake.upload_file.side_effect = upload_file
    return fake


def _make_upload(
    filename: str = "file.pdf", content: bytes = b"%PDF-1.4", content_type: str = "application/pdf"
) -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def make_upload():
    """Factory for in-memory multipart uploads."""
    return _make_upload


class Seeder:
    """Builds marketplace rows for service tests."""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def add(self, *rows):
        async with self.session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows[0] if len(rows) == 1 else rows

    async def club(self, **overrides) -> Club:
        n = self._next()
        values = {"name": f"Club {n}", "ref_code": f"REF{n}", "category": "football"}
        values.update(overrides)
        return await self.add(Club(**values))

    async def company(self, name: str = "Acme", club: Club | None = None, **overrides) -> Company:
        n = self._next()
        user = User(name=name, email=f"company{n}@example.com", user_type=UserType.COMPANY)
        values = {"onboarding_steps": [1, 2]}
        values.update(overrides)
        company = Company(user=user, **values)
        rows = [user, company]
        if club is not None:
            rows.append(
                Affiliate(
                    user=user,
                    club_id=club.id,
                    type=AffiliateType.COMPANY,
                    status=AffiliateStatus.ACTIVE,
                    is_approved=True,
                )
            )
        await self.add(*rows)
        return company

    async def player(
        self,
        name: str = "Jane Doe",
        user_type: UserType = UserType.PLAYER,
        club: Club | None = None,
        **overrides,
    ) -> Player:
        n = self._next()
        user = User(name=name, email=f"player{n}@example.com", user_type=user_type)
        values = {"onboarding_steps": [1, 2, 3, 4]}
        values.update(overrides)
        player = Player(user=user, **values)
        rows = [user, player]
        if club is not None:
            rows.append(
                Affiliate(
                    user=user,
                    club_id=club.id,
                    type=AffiliateType(user_type.value),
                    status=AffiliateStatus.ACTIVE,
                    is_approved=True,
                )
            )
        await self.add(*rows)
        return player

    async def job(self, company: Company, title: str = "Striker", **overrides) -> Job:
        values = {"title": title, "description": f"{title} wanted", "status": JobStatus.ACTIVE}
        values.update(overrides)
        return await self.add(Job(company_id=company.id, **values))


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)
