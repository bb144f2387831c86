"""Company profile, shortlist/hire and questionnaire schemas."""

from typing import Any, ClassVar, Optional

from pydantic import Field, field_validator, model_validator

from api.schemas.common import (
    ApiModel,
    ListQuery,
    enum_values,
    parse_json_value,
    parse_string_list,
)
from database.models.users import AffiliateType


class RegionSchema(ApiModel):
    """Primary region plus secondary ones; the four-item cap is a service rule."""

    primary: Optional[str] = None
    secondary: list[str] = Field(default_factory=list)

    @field_validator("secondary", mode="before")
    @classmethod
    def coerce_secondary(cls, v: Any) -> Any:
        return parse_string_list(v) or []


class CompanyProfileFields(ApiModel):
    industry: Optional[str] = None
    about: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    tagline: Optional[str] = None
    region: Optional[RegionSchema] = None

    @field_validator("region", mode="before")
    @classmethod
    def coerce_region(cls, v: Any) -> Any:
        return parse_json_value(v)


class CompanyCompleteProfileForm(CompanyProfileFields):
    step: int = Field(ge=1)


class CompanyUpdateProfileForm(CompanyProfileFields):
    name: Optional[str] = Field(default=None, min_length=1)
    focus: Optional[str] = None
    preferred_clubs: Optional[list[str]] = None

    @field_validator("preferred_clubs", mode="before")
    @classmethod
    def coerce_clubs(cls, v: Any) -> Any:
        return parse_string_list(v)


# ==================== Shortlist / hire ===================== #
class ShortlistPlayerRequest(ApiModel):
    candidate: str = Field(min_length=1, description="Player id")
    jobs: list[str] = Field(default_factory=list, description="Job ids")

    @field_validator("jobs", mode="before")
    @classmethod
    def coerce_jobs(cls, v: Any) -> Any:
        return parse_string_list(v) or []


class RemoveShortlistedPlayerRequest(ShortlistPlayerRequest):
    pass


class HireCandidateRequest(ApiModel):
    candidate: str = Field(min_length=1, description="Player id")
    job: str = Field(min_length=1, description="Job id")


class PostPartnerAnswersRequest(ApiModel):
    answers: list[Any] | dict[str, Any]

    @model_validator(mode="after")
    def answers_not_empty(self) -> "PostPartnerAnswersRequest":
        if not self.answers:
            raise ValueError("answers must not be empty")
        return self


# ==================== Queries ===================== #
class GetPlayersQuery(ListQuery):
    """Candidate discovery filters."""

    array_fields: ClassVar[tuple[str, ...]] = (
        "regions",
        "candidates",
        "workTypes",
        "clubTypes",
        "clubs",
        "industry",
    )
    upper_fields: ClassVar[tuple[str, ...]] = ("candidates",)

    regions: Optional[list[str]] = None
    candidates: Optional[list[str]] = None
    work_types: Optional[list[str]] = None
    club_types: Optional[list[str]] = None
    clubs: Optional[list[str]] = None
    industry: Optional[list[str]] = None

    @field_validator("candidates")
    @classmethod
    def validate_candidates(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return enum_values(
            v, {AffiliateType.PLAYER.value, AffiliateType.SUPPORTER.value}, "candidates"
        )
