"""Job request and query schemas."""

from datetime import datetime
from typing import Any, ClassVar, Optional

from pydantic import Field, field_validator

from api.schemas.common import (
    ApiModel,
    ListQuery,
    enum_values,
    parse_form_bool,
    parse_json_value,
    parse_string_list,
)
from core.shaping import to_employment_type_name
from database.models.jobs import ApplicationStatus, DraftOrigin, EmploymentType, JobStatus

EMPLOYMENT_TYPES = {t.value for t in EmploymentType}


def normalize_job_type(value: Any) -> Optional[str]:
    """``full-time`` / ``Full_Time`` -> ``FULL_TIME`` (validated)."""
    if value is None or value == "":
        return None
    name = to_employment_type_name(value)
    if name not in EMPLOYMENT_TYPES:
        raise ValueError(
            f"Invalid employment type: {value}. "
            f"Allowed: {', '.join(sorted(EMPLOYMENT_TYPES))}"
        )
    return name


def normalize_job_status(value: Any, allow_inactive: bool = False) -> Optional[JobStatus]:
    """``draft``/``drafted`` -> DRAFT, ``active`` -> ACTIVE (``inactive`` on update)."""
    if value is None or value == "":
        return None
    normalized = str(value).strip().lower()
    if normalized in ("draft", "drafted"):
        return JobStatus.DRAFT
    if normalized == "active":
        return JobStatus.ACTIVE
    if allow_inactive and normalized == "inactive":
        return JobStatus.INACTIVE
    allowed = "draft, active, inactive" if allow_inactive else "draft or active"
    raise ValueError(f"Status must be one of: {allowed}")


class SalarySchema(ApiModel):
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    frequency: Optional[str] = None


class JobFields(ApiModel):
    """Fields shared by job creation and update."""

    description: Optional[str] = None
    type: Optional[str] = None
    skills: Optional[list[str]] = None
    responsibilities: Optional[list[str]] = None
    qualifications: Optional[list[str]] = None
    traits: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    location: Optional[str] = None
    salary: Optional[SalarySchema] = None
    start_date: Optional[datetime] = None
    open_to_all: Optional[bool] = None

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v: Any) -> Optional[str]:
        return normalize_job_type(v)

    @field_validator(
        "skills", "responsibilities", "qualifications", "traits", "tags", mode="before"
    )
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        return parse_string_list(v)

    @field_validator("salary", mode="before")
    @classmethod
    def coerce_salary(cls, v: Any) -> Any:
        return parse_json_value(v)

    @field_validator("open_to_all", mode="before")
    @classmethod
    def coerce_bool(cls, v: Any) -> Any:
        return parse_form_bool(v)


class CreateJobRequest(JobFields):
    title: str = Field(min_length=1)
    role: str = Field(min_length=1)
    description: str = Field(min_length=1)
    status: Optional[JobStatus] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Optional[JobStatus]:
        return normalize_job_status(v)


class UpdateJobRequest(JobFields):
    title: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = Field(default=None, min_length=1)
    status: Optional[JobStatus] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Optional[JobStatus]:
        return normalize_job_status(v, allow_inactive=True)


# ==================== Queries ===================== #
class GetJobsQuery(ListQuery):
    """Company job listing filters."""

    array_fields: ClassVar[tuple[str, ...]] = (
        "status",
        "createdAt",
        "draftOrigin",
        "draftedAt",
    )
    upper_fields: ClassVar[tuple[str, ...]] = ("status",)

    status: Optional[list[str]] = None
    created_at: Optional[list[str]] = None
    draft_origin: Optional[list[str]] = None
    drafted_at: Optional[list[str]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return enum_values(v, {"ACTIVE", "DRAFTED"}, "status")

    @field_validator("draft_origin")
    @classmethod
    def validate_draft_origin(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return enum_values(v, {o.value for o in DraftOrigin}, "draftOrigin")

    @field_validator("created_at", "drafted_at")
    @classmethod
    def validate_range(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is not None and len(v) > 2:
            raise ValueError("Date ranges take at most two values: [from, to]")
        return v


class JobsWithShortlistedQuery(ListQuery):
    array_fields: ClassVar[tuple[str, ...]] = ("status",)
    upper_fields: ClassVar[tuple[str, ...]] = ("status",)

    status: Optional[list[str]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return enum_values(v, {s.value for s in JobStatus}, "status")


class PlayerJobsQuery(ListQuery):
    """Job board filters for players."""

    array_fields: ClassVar[tuple[str, ...]] = ("workTypes", "industry", "regions")

    work_types: Optional[list[str]] = None
    industry: Optional[list[str]] = None
    regions: Optional[list[str]] = None

    @field_validator("work_types")
    @classmethod
    def validate_work_types(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return None
        return [normalize_job_type(value) for value in v]


class JobTrackingQuery(ListQuery):
    array_fields: ClassVar[tuple[str, ...]] = ("applicationStatus",)
    upper_fields: ClassVar[tuple[str, ...]] = ("applicationStatus",)

    application_status: Optional[list[str]] = None

    @field_validator("application_status")
    @classmethod
    def validate_application_status(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return enum_values(v, {s.value for s in ApplicationStatus}, "applicationStatus")


class ApplyJobForm(ApiModel):
    """Multipart fields of a job application; files travel separately."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    zip: Optional[str] = None
    legally_authorized: Optional[bool] = None
    visa_sponsorship: Optional[bool] = None
    years_of_experience: Optional[int] = Field(default=None, ge=0, le=50)

    @field_validator("legally_authorized", "visa_sponsorship", mode="before")
    @classmethod
    def coerce_bool(cls, v: Any) -> Any:
        return parse_form_bool(v)
