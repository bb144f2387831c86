"""
Users Module

Accounts, clubs, club affiliations, chats and notifications shared by every
role on the marketplace.
"""

import uuid

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    func,
    Text,
    Enum as SQLEnum,
)
from database.engine import Base
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.companies import Company
    from database.models.players import Player


def generate_id() -> str:
    """Primary keys are opaque string UUIDs."""
    return str(uuid.uuid4())


# ==================== User Enums ===================== #
class UserType(str, PyEnum):
    """Role of an account on the marketplace."""

    ADMIN = "ADMIN"
    CLUB = "CLUB"
    COMPANY = "COMPANY"
    PLAYER = "PLAYER"
    SUPPORTER = "SUPPORTER"


class UserStatus(str, PyEnum):
    """Account status."""

    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


class AffiliateType(str, PyEnum):
    """Role a user holds inside a club."""

    COMPANY = "COMPANY"
    PLAYER = "PLAYER"
    SUPPORTER = "SUPPORTER"


class AffiliateStatus(str, PyEnum):
    """Invitation / approval state of an affiliation."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"


class ChatStatus(str, PyEnum):
    """Company to candidate chat request state."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


# ==================== User ===================== #
class User(Base):
    """Account identity. Role specific data lives on Company or Player."""

    __tablename__: str = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    user_type: Mapped[UserType] = mapped_column(
        SQLEnum(UserType, native_enum=False, length=50),
        nullable=False,
        index=True,
    )
    status: Mapped[UserStatus] = mapped_column(
        SQLEnum(UserStatus, native_enum=False, length=50),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
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

    company: Mapped["Company | None"] = relationship(
        "Company", back_populates="user", uselist=False
    )
    player: Mapped["Player | None"] = relationship(
        "Player", back_populates="user", uselist=False
    )
    affiliates: Mapped[list["Affiliate"]] = relationship(
        "Affiliate", back_populates="user"
    )


# ==================== Clubs ===================== #
class Club(Base):
    """A sports club that companies and candidates affiliate with."""

    __tablename__: str = "clubs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(1024))
    banner: Mapped[str | None] = mapped_column(String(1024))
    preferred_color: Mapped[str | None] = mapped_column(String(32))
    category: Mapped[str | None] = mapped_column(String(100), index=True)
    ref_code: Mapped[str | None] = mapped_column(String(64), unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    affiliates: Mapped[list["Affiliate"]] = relationship(
        "Affiliate", back_populates="club"
    )


class Affiliate(Base):
    """
    Approval or pending relationship between a user and a club.

    Pending invitations carry only an email until the invitee signs up.
    """

    __tablename__: str = "affiliates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True, index=True
    )
    club_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clubs.id"), nullable=False, index=True
    )
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    type: Mapped[AffiliateType] = mapped_column(
        SQLEnum(AffiliateType, native_enum=False, length=50), nullable=False
    )
    status: Mapped[AffiliateStatus] = mapped_column(
        SQLEnum(AffiliateStatus, native_enum=False, length=50),
        nullable=False,
        default=AffiliateStatus.PENDING,
    )
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    by_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ref_code: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    user: Mapped["User | None"] = relationship("User", back_populates="affiliates")
    club: Mapped["Club"] = relationship("Club", back_populates="affiliates")


# ==================== Messaging ===================== #
class Chat(Base):
    """Chat channel between a company user and a candidate user."""

    __tablename__: str = "chats"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    company_user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    player_user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    status: Mapped[ChatStatus] = mapped_column(
        SQLEnum(ChatStatus, native_enum=False, length=50),
        nullable=False,
        default=ChatStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )


class Notification(Base):
    __tablename__: str = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str | None] = mapped_column(Text)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
