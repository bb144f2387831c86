"""
Companies Module

Company profiles, onboarding progress, questionnaire results and the
company task board used on the dashboard.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Float,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
)
from database.engine import Base
from database.models.users import generate_id
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.users import User
    from database.models.jobs import Job


COMPANY_ONBOARDING_STEPS = [1, 2]


# ==================== Company Enums ===================== #
class TaskStatus(str, PyEnum):
    """Company task board status."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class Company(Base):
    """
    Company profile, 1:1 with a COMPANY user.

    ``onboarding_steps`` holds the step numbers still pending, not the ones
    already completed.
    """

    __tablename__: str = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, unique=True, index=True
    )

    # Profile
    about: Mapped[str | None] = mapped_column(Text)
    industry: Mapped[str | None] = mapped_column(String(255), index=True)
    country: Mapped[str | None] = mapped_column(String(100), index=True)
    address: Mapped[str | None] = mapped_column(String(500))
    tagline: Mapped[str | None] = mapped_column(String(500))
    focus: Mapped[str | None] = mapped_column(String(255))
    availability: Mapped[str | None] = mapped_column(String(100))
    region: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    preferred_clubs: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Media
    avatar: Mapped[str | None] = mapped_column(String(1024))
    secondary_avatar: Mapped[str | None] = mapped_column(String(1024))
    banner: Mapped[str | None] = mapped_column(String(1024))

    # Onboarding & questionnaire
    onboarding_steps: Mapped[list[int]] = mapped_column(
        JSON, default=lambda: list(COMPANY_ONBOARDING_STEPS)
    )
    score: Mapped[float | None] = mapped_column(Float)
    is_questionnaire_taken: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    analysis_result: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    recently_viewed_players: Mapped[list[str]] = mapped_column(JSON, default=list)

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

    user: Mapped["User"] = relationship("User", back_populates="company")
    jobs: Mapped[list["Job"]] = relationship("Job", back_populates="company")
    tasks: Mapped[list["Task"]] = relationship("Task", back_populates="company")


class Task(Base):
    __tablename__: str = "tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(TaskStatus, native_enum=False, length=50),
        nullable=False,
        default=TaskStatus.TODO,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    company: Mapped["Company"] = relationship("Company", back_populates="tasks")
