"""Player/supporter profile schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from api.schemas.common import (
    ApiModel,
    blank_to_none,
    parse_form_bool,
    parse_json_value,
    parse_string_list,
)
from api.schemas.jobs import normalize_job_type


class EmploymentTypeSchema(ApiModel):
    """Accepts ``full-time`` style values and stores ``FULL_TIME`` names."""

    primary: Optional[str] = None
    secondary: list[str] = Field(default_factory=list)

    @field_validator("primary", mode="before")
    @classmethod
    def validate_primary(cls, v: Any) -> Optional[str]:
        return normalize_job_type(v)

    @field_validator("secondary", mode="before")
    @classmethod
    def validate_secondary(cls, v: Any) -> list[str]:
        return [normalize_job_type(value) for value in parse_string_list(v) or []]


class JobRoleSchema(ApiModel):
    primary: Optional[str] = None
    secondary: list[str] = Field(default_factory=list)

    @field_validator("secondary", mode="before")
    @classmethod
    def coerce_secondary(cls, v: Any) -> Any:
        return parse_string_list(v) or []


class ExperienceSchema(ApiModel):
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    current: Optional[bool] = None
    remote: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    company_phone: Optional[str] = None
    company_email: Optional[str] = None
    skills: Optional[list[str]] = None
    tools: Optional[list[str]] = None
    responsibilities: Optional[list[str]] = None

    @field_validator("current", "remote", mode="before")
    @classmethod
    def coerce_bool(cls, v: Any) -> Any:
        return parse_form_bool(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_dates(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("skills", "tools", "responsibilities", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        return parse_string_list(v)


class SecurityQuestionSchema(ApiModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)


class PlayerProfileFields(ApiModel):
    """
    Profile fields accepted from multipart forms.

    Structured values (``employmentType``, ``jobRole``, ``experiences`` and
    the string arrays) may arrive as JSON strings or repeated ``key[]`` fields.
    """

    about: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    shirt_number: Optional[int] = Field(default=None, ge=1, le=99)
    birth_year: Optional[int] = Field(default=None, ge=1950, le=2010)
    sports_history: Optional[str] = None
    industry: Optional[str] = None
    years_of_experience: Optional[int] = Field(default=None, ge=0, le=50)
    work_locations: Optional[list[str]] = None
    employment_type: Optional[EmploymentTypeSchema] = None
    job_role: Optional[JobRoleSchema] = None
    traits: Optional[list[str]] = None
    skills: Optional[list[str]] = None
    experiences: Optional[list[ExperienceSchema]] = None
    certifications: Optional[list[str]] = None
    resume: Optional[str] = None
    work_availability: Optional[bool] = None

    @field_validator(
        "shirt_number", "birth_year", "years_of_experience", mode="before"
    )
    @classmethod
    def blank_numbers(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator(
        "work_locations", "traits", "skills", "certifications", "experiences", mode="before"
    )
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        return parse_string_list(v)

    @field_validator("employment_type", "job_role", mode="before")
    @classmethod
    def coerce_document(cls, v: Any) -> Any:
        return parse_json_value(v)

    @field_validator("work_availability", mode="before")
    @classmethod
    def coerce_bool(cls, v: Any) -> Any:
        return parse_form_bool(v)


class PlayerCompleteProfileForm(PlayerProfileFields):
    step: int = Field(ge=1, le=4)
    security_question: Optional[SecurityQuestionSchema] = None

    @field_validator("security_question", mode="before")
    @classmethod
    def coerce_question(cls, v: Any) -> Any:
        return parse_json_value(v)


class PlayerUpdateProfileForm(PlayerProfileFields):
    name: Optional[str] = Field(default=None, min_length=1)
