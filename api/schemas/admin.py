"""Administration schemas."""

from typing import Any

from pydantic import EmailStr, Field, field_validator

from api.schemas.common import ApiModel, ListQuery, parse_string_list
from database.models.users import UserStatus


class AdminCompaniesQuery(ListQuery):
    status: UserStatus = UserStatus.ACTIVE

    @field_validator("status", mode="before")
    @classmethod
    def upper_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or UserStatus.ACTIVE
        return v


class InviteCompaniesRequest(ApiModel):
    club_id: str = Field(min_length=1)
    emails: list[EmailStr] = Field(min_length=1)

    @field_validator("emails", mode="before")
    @classmethod
    def coerce_emails(cls, v: Any) -> Any:
        return parse_string_list(v)

    @field_validator("emails")
    @classmethod
    def dedupe_emails(cls, v: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for email in v:
            seen.setdefault(email.lower(), None)
        return list(seen)
