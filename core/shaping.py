"""
Response shaping helpers.

Stored enums are upper-case names (``FULL_TIME``, ``ACTIVE``); API consumers
receive lower-case strings. Employment types additionally swap ``_`` for
``-``. Job roles and industries are lower-cased as-is.
"""

from enum import Enum
from typing import Any, Iterable, Optional


def _raw(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def lower_enum(value: Any) -> Optional[str]:
    """``ACTIVE`` -> ``active``; ``None`` stays ``None``."""
    raw = _raw(value)
    return raw.lower() if raw is not None else None


def map_employment_type(value: Any) -> Optional[str]:
    """``FULL_TIME`` -> ``full-time``."""
    raw = _raw(value)
    return raw.lower().replace("_", "-") if raw is not None else None


def to_employment_type_name(value: Any) -> Optional[str]:
    """Inverse of ``map_employment_type``: ``full-time`` -> ``FULL_TIME``."""
    raw = _raw(value)
    if raw is None:
        return None
    return raw.strip().upper().replace("-", "_")


def map_employment_types(document: Optional[dict]) -> Optional[dict]:
    """Apply ``map_employment_type`` to a ``{primary, secondary}`` document."""
    if not document:
        return document
    return {
        "primary": map_employment_type(document.get("primary")),
        "secondary": [map_employment_type(v) for v in document.get("secondary") or []],
    }


def lower_role_document(document: Optional[dict]) -> Optional[dict]:
    """Lower-case a job-role ``{primary, secondary}`` document, no substitution."""
    if not document:
        return document
    primary = document.get("primary")
    return {
        "primary": primary.lower() if isinstance(primary, str) else primary,
        "secondary": [
            v.lower() if isinstance(v, str) else v for v in document.get("secondary") or []
        ],
    }


def salary_payload(salary: Optional[dict]) -> dict:
    salary = salary or {}
    return {
        "min": salary.get("min") or 0,
        "max": salary.get("max") or 0,
        "currency": salary.get("currency") or "USD",
    }


def club_payload(club, fields: Iterable[str] = ("id", "name", "avatar")) -> Optional[dict]:
    """
    Serialize a club with the requested fields, or ``None`` when absent.

    Endpoints differ on what an absent club looks like (``None`` or ``{}``);
    callers apply their own default with ``or {}``.
    """
    if club is None:
        return None
    mapping = {
        "id": club.id,
        "name": club.name,
        "avatar": club.avatar,
        "banner": club.banner,
        "preferredColor": club.preferred_color,
        "category": club.category,
    }
    return {field: mapping[field] for field in fields}


def sample_avatars(rows: Iterable[Any], key: str, per_group: int = 12) -> dict[str, list[str]]:
    """
    Group avatar URLs by ``getattr(row, key)`` keeping the first ``per_group``.

    Rows must expose ``avatar``; rows without one are skipped.
    """
    grouped: dict[str, list[str]] = {}
    for row in rows:
        avatar = getattr(row, "avatar", None)
        if not avatar:
            continue
        bucket = grouped.setdefault(getattr(row, key), [])
        if len(bucket) < per_group:
            bucket.append(avatar)
    return grouped
