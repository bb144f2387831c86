"""Common Pydantic schemas and validators shared across the API."""

import json
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.query import DEFAULT_LIMIT, DEFAULT_PAGE


class ApiModel(BaseModel):
    """Base for request shapes: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ==================== Coercion helpers ===================== #
# Multipart forms deliver everything as strings; these turn the common
# encodings back into structured values before field validation runs.


def parse_json_value(value: Any) -> Any:
    """Decode a JSON-encoded string, leaving anything else untouched."""
    if isinstance(value, str):
        text = value.strip()
        if text[:1] in ("{", "["):
            try:
                return json.loads(text)
            except ValueError:
                return value
    return value


def parse_string_list(value: Any) -> Any:
    """
    Coerce to a list.

    Accepts a list, a JSON array string, or a single scalar (wrapped).
    Blank values become an empty list.
    """
    if value is None:
        return None
    value = parse_json_value(value)
    if isinstance(value, (list, tuple)):
        return [parse_json_value(v) for v in value if v not in (None, "")]
    if isinstance(value, str) and not value.strip():
        return []
    return [value]


def parse_form_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
    return value


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ==================== List queries ===================== #
class ListQuery(ApiModel):
    """
    Pagination and free-text search.

    ``page``/``limit`` default to 1/10 when absent, blank or zero.
    Subclasses name their multi-valued keys in ``array_fields`` (wire names)
    and the ones to upper-case in ``upper_fields``.
    """

    array_fields: ClassVar[tuple[str, ...]] = ()
    upper_fields: ClassVar[tuple[str, ...]] = ()

    page: Optional[int] = Field(
        default=DEFAULT_PAGE, ge=0, description="Page number (1-indexed)"
    )
    limit: Optional[int] = Field(
        default=DEFAULT_LIMIT, ge=0, le=100, description="Items per page"
    )
    search: Optional[str] = Field(default=None, description="Case-insensitive search term")

    @field_validator("page", "limit", mode="before")
    @classmethod
    def blank_number(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("page")
    @classmethod
    def default_page(cls, v: Optional[int]) -> int:
        return v or DEFAULT_PAGE

    @field_validator("limit")
    @classmethod
    def default_limit(cls, v: Optional[int]) -> int:
        return v or DEFAULT_LIMIT

    @field_validator("search", mode="before")
    @classmethod
    def blank_search(cls, v: Any) -> Any:
        return blank_to_none(v)


def enum_values(values: Optional[list[str]], allowed: set[str], label: str) -> Optional[list[str]]:
    """Validate already-normalised values against ``allowed``."""
    if values is None:
        return None
    invalid = [v for v in values if v not in allowed]
    if invalid:
        raise ValueError(
            f"Invalid {label}: {', '.join(invalid)}. Allowed: {', '.join(sorted(allowed))}"
        )
    return values
