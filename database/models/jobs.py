"""
Jobs Module

Job postings owned by companies, and the per-candidate records hanging off
them: shortlist/hire rows, applications and bookmarks.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Integer,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
    UniqueConstraint,
)
from database.engine import Base
from database.models.users import generate_id
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.companies import Company
    from database.models.players import Player


# ==================== Job Enums ===================== #
class JobStatus(str, PyEnum):
    """Job posting status."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class EmploymentType(str, PyEnum):
    """Job and candidate employment type."""

    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"
    FREELANCE = "FREELANCE"
    TEMPORARY = "TEMPORARY"
    VOLUNTEER = "VOLUNTEER"


class DraftOrigin(str, PyEnum):
    """How a job reached its current DRAFT state."""

    FROM_POSTED = "from_posted"  # was ACTIVE/INACTIVE before
    NEVER_POSTED = "never_posted"


class ShortlistStatus(str, PyEnum):
    NOT_HIRED = "NOT_HIRED"
    HIRED = "HIRED"


class ApplicationStatus(str, PyEnum):
    """Candidate application status."""

    APPLIED = "APPLIED"
    SHORTLISTED = "SHORTLISTED"
    HIRED = "HIRED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


# ==================== Jobs ===================== #
class Job(Base):
    """
    Job posting.

    ``draft_origin``/``drafted_at`` are only set when a posted job is moved
    back to DRAFT and are cleared when it becomes ACTIVE again.
    """

    __tablename__: str = "jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    role: Mapped[str | None] = mapped_column(String(255))
    type: Mapped[EmploymentType] = mapped_column(
        SQLEnum(EmploymentType, native_enum=False, length=50),
        nullable=False,
        default=EmploymentType.FULL_TIME,
    )
    location: Mapped[str | None] = mapped_column(String(255))
    skills: Mapped[list[str]] = mapped_column(JSON, default=list)
    responsibilities: Mapped[list[str]] = mapped_column(JSON, default=list)
    qualifications: Mapped[list[str]] = mapped_column(JSON, default=list)
    traits: Mapped[list[str]] = mapped_column(JSON, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    salary: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    open_to_all: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[JobStatus] = mapped_column(
        SQLEnum(JobStatus, native_enum=False, length=50),
        nullable=False,
        default=JobStatus.ACTIVE,
        index=True,
    )
    draft_origin: Mapped[DraftOrigin | None] = mapped_column(
        SQLEnum(DraftOrigin, native_enum=False, length=50), nullable=True
    )
    drafted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now,
        server_default=func.now(),
        onupdate=now,
    )

    company: Mapped["Company"] = relationship("Company", back_populates="jobs")
    shortlisted: Mapped[list["Shortlisted"]] = relationship(
        "Shortlisted", back_populates="job"
    )
    applications: Mapped[list["Application"]] = relationship(
        "Application", back_populates="job"
    )


class Shortlisted(Base):
    """A candidate under consideration (or hired) for a job."""

    __tablename__: str = "shortlisted"
    __table_args__ = (
        UniqueConstraint("job_id", "player_id", name="uq_shortlisted_job_player"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("jobs.id"), nullable=False, index=True
    )
    player_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("players.id"), nullable=False, index=True
    )
    status: Mapped[ShortlistStatus] = mapped_column(
        SQLEnum(ShortlistStatus, native_enum=False, length=50),
        nullable=False,
        default=ShortlistStatus.NOT_HIRED,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    job: Mapped["Job"] = relationship("Job", back_populates="shortlisted")
    player: Mapped["Player"] = relationship("Player")


class Application(Base):
    __tablename__: str = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "player_id", name="uq_application_job_player"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("jobs.id"), nullable=False, index=True
    )
    player_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("players.id"), nullable=False, index=True
    )
    name: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50))
    zip: Mapped[str | None] = mapped_column(String(20))
    legally_authorized: Mapped[bool | None] = mapped_column(Boolean)
    visa_sponsorship: Mapped[bool | None] = mapped_column(Boolean)
    years_of_experience: Mapped[int | None] = mapped_column(Integer)
    resume: Mapped[str | None] = mapped_column(String(1024))
    application_letter: Mapped[str | None] = mapped_column(String(1024))
    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, native_enum=False, length=50),
        nullable=False,
        default=ApplicationStatus.APPLIED,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    job: Mapped["Job"] = relationship("Job", back_populates="applications")
    player: Mapped["Player"] = relationship("Player")


class PlayerBookmark(Base):
    __tablename__: str = "player_bookmarks"
    __table_args__ = (
        UniqueConstraint("player_id", "job_id", name="uq_bookmark_player_job"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    player_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("players.id"), nullable=False, index=True
    )
    job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("jobs.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
