"""
Players Module

Player and supporter profiles (both roles share one table) together with
their work experiences.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Float,
    Integer,
    func,
    Text,
    JSON,
)
from database.engine import Base
from database.models.users import generate_id
from core.utils.datetime import now
from datetime import datetime
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.users import User, Club


PLAYER_ONBOARDING_STEPS = [1, 2, 3, 4]


class Player(Base):
    """
    Candidate profile for PLAYER and SUPPORTER users.

    ``employment_type`` and ``job_role`` are ``{"primary": str, "secondary": [str]}``
    documents; ``work_country`` lists up to five work locations.
    """

    __tablename__: str = "players"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, unique=True, index=True
    )
    club_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("clubs.id"), nullable=True, index=True
    )

    # Profile
    about: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(String(500))
    country: Mapped[str | None] = mapped_column(String(100))
    phone: Mapped[str | None] = mapped_column(String(50))
    avatar: Mapped[str | None] = mapped_column(String(1024))
    banner: Mapped[str | None] = mapped_column(String(1024))
    shirt_number: Mapped[int | None] = mapped_column(Integer)
    birth_year: Mapped[int | None] = mapped_column(Integer)
    sports_history: Mapped[str | None] = mapped_column(Text)
    industry: Mapped[str | None] = mapped_column(String(255))
    years_of_experience: Mapped[int | None] = mapped_column(Integer)
    work_availability: Mapped[bool | None] = mapped_column(Boolean)

    # Semi-structured career data
    work_country: Mapped[list[str]] = mapped_column(JSON, default=list)
    employment_type: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    job_role: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    traits: Mapped[list[str]] = mapped_column(JSON, default=list)
    skills: Mapped[list[str]] = mapped_column(JSON, default=list)
    certifications: Mapped[list[str]] = mapped_column(JSON, default=list)
    resume: Mapped[str | None] = mapped_column(String(1024))
    security_question: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    # Onboarding & questionnaire
    onboarding_steps: Mapped[list[int]] = mapped_column(
        JSON, default=lambda: list(PLAYER_ONBOARDING_STEPS)
    )
    score: Mapped[float | None] = mapped_column(Float)
    is_questionnaire_taken: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    analysis_result: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    recently_viewed_companies: Mapped[list[str]] = mapped_column(JSON, default=list)

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

    user: Mapped["User"] = relationship("User", back_populates="player")
    club: Mapped["Club | None"] = relationship("Club")
    experiences: Mapped[list["Experience"]] = relationship(
        "Experience", back_populates="player", order_by="Experience.created_at"
    )


class Experience(Base):
    """Work experience entry; replaced wholesale on every profile update."""

    __tablename__: str = "experiences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    player_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("players.id"), nullable=False, index=True
    )
    title: Mapped[str | None] = mapped_column(String(255))
    company: Mapped[str | None] = mapped_column(String(255))
    current: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    remote: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    company_phone: Mapped[str | None] = mapped_column(String(50))
    company_email: Mapped[str | None] = mapped_column(String(255))
    skills: Mapped[list[str]] = mapped_column(JSON, default=list)
    tools: Mapped[list[str]] = mapped_column(JSON, default=list)
    responsibilities: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    player: Mapped["Player"] = relationship("Player", back_populates="experiences")
