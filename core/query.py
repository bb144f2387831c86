"""
List-query building blocks shared by every paginated endpoint.

Three pieces, used in this order by the service orchestrators:

* query normalizer  - ``query_list`` / ``normalize_query`` turn raw query
  params (``status=x`` or ``status[]=x&status[]=y``) into lists;
* filter builder    - ``search_clause``, ``in_clause`` and
  ``date_range_clause`` produce SQLAlchemy predicates, while
  ``PostFilter`` applies the JSON-field filters in memory;
* paginator         - ``to_offset``, ``pagination_meta`` and ``fetch_page``.
"""

from dataclasses import dataclass
from math import ceil
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.utils.datetime import parse_datetime

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


# ==================== Normalizer ===================== #
def _get_all(params: Mapping[str, Any], key: str) -> list[Any]:
    # starlette QueryParams / FormData expose repeated keys via getlist
    if hasattr(params, "getlist"):
        return list(params.getlist(key))
    value = params.get(key)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def query_list(
    params: Mapping[str, Any],
    key: str,
    upper: bool = False,
    lower: bool = False,
) -> Optional[list[str]]:
    """
    Read a filter that may arrive as ``key`` or ``key[]``.

    ``key[]`` wins when both are present. Blank values are dropped and caller
    order is preserved. Returns ``None`` when nothing usable remains so that
    callers can tell "not filtered" from "filtered by nothing".
    """
    raw = _get_all(params, f"{key}[]") or _get_all(params, key)
    values: list[str] = []
    for item in raw:
        nested = item if isinstance(item, (list, tuple)) else [item]
        for value in nested:
            if value is None:
                continue
            text = str(value).strip()
            if not text:
                continue
            if upper:
                text = text.upper()
            elif lower:
                text = text.lower()
            values.append(text)
    return values or None


def normalize_query(
    params: Mapping[str, Any],
    array_keys: Iterable[str] = (),
    upper_keys: Iterable[str] = (),
) -> dict[str, Any]:
    """
    Flatten raw query params into a plain dict ready for model validation.

    Keys listed in ``array_keys`` become lists (or are omitted when empty);
    those also in ``upper_keys`` are upper-cased. Every other key keeps its
    last scalar value. ``key[]`` spellings are folded onto ``key``.
    """
    array_keys = set(array_keys)
    upper_keys = set(upper_keys)
    normalized: dict[str, Any] = {}

    for raw_key in params.keys():
        key = raw_key[:-2] if raw_key.endswith("[]") else raw_key
        if key in array_keys or key in normalized:
            continue
        values = _get_all(params, raw_key)
        if values and values[-1] not in (None, ""):
            normalized[key] = values[-1]

    for key in array_keys:
        values = query_list(params, key, upper=key in upper_keys)
        if values is not None:
            normalized[key] = values

    return normalized


# ==================== Filter builder ===================== #
def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_clause(term: Optional[str], *columns):
    """Case-insensitive substring match of ``term`` across ``columns`` (OR)."""
    if not term or not term.strip():
        return None
    pattern = _like_pattern(term.strip())
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


def in_clause(column, values: Optional[Sequence[Any]]):
    if not values:
        return None
    return column.in_(list(values))


def date_range_clause(column, bounds: Optional[Sequence[Any]]):
    """
    ``gte``/``lte`` predicate from a ``[from, to]`` pair.

    Either bound may be missing or blank; an unparsable bound is ignored.
    """
    if not bounds:
        return None
    start = parse_datetime(bounds[0]) if len(bounds) > 0 else None
    end = parse_datetime(bounds[1]) if len(bounds) > 1 else None
    parts = []
    if start is not None:
        parts.append(column >= start)
    if end is not None:
        parts.append(column <= end)
    if not parts:
        return None
    return and_(*parts)


def where_all(*clauses) -> list:
    """Drop the ``None`` placeholders produced by optional filters."""
    return [clause for clause in clauses if clause is not None]


@dataclass
class PostFilter:
    """
    In-memory filters over semi-structured candidate fields.

    These run after pagination, on the page that was already fetched, so a
    page can hold fewer than ``limit`` rows while ``total`` keeps the
    pre-filter count.
    """

    regions: Optional[list[str]] = None
    work_types: Optional[list[str]] = None
    industries: Optional[list[str]] = None

    @property
    def active(self) -> bool:
        return bool(self.regions or self.work_types or self.industries)

    @staticmethod
    def _primary_and_secondary(document: Optional[dict]) -> list[str]:
        if not document:
            return []
        values = []
        if document.get("primary"):
            values.append(str(document["primary"]))
        values.extend(str(v) for v in document.get("secondary") or [] if v)
        return values

    def matches_regions(self, work_country: Optional[list[str]]) -> bool:
        if not self.regions:
            return True
        countries = [c.lower() for c in work_country or []]
        return any(
            region.lower() in country for region in self.regions for country in countries
        )

    def matches_work_types(self, employment_type: Optional[dict]) -> bool:
        if not self.work_types:
            return True
        player_types = {
            value.lower().replace("_", "-")
            for value in self._primary_and_secondary(employment_type)
        }
        return any(work_type.lower() in player_types for work_type in self.work_types)

    def matches_industries(self, job_role: Optional[dict]) -> bool:
        if not self.industries:
            return True
        roles = [value.lower() for value in self._primary_and_secondary(job_role)]
        return any(
            industry.lower() in role for industry in self.industries for role in roles
        )

    def apply(self, rows: list, get: Callable[[Any], Any] = lambda row: row) -> list:
        """Keep rows whose candidate (``get(row)``) passes every active filter."""
        if not self.active:
            return rows
        kept = []
        for row in rows:
            candidate = get(row)
            if (
                self.matches_regions(candidate.work_country)
                and self.matches_work_types(candidate.employment_type)
                and self.matches_industries(candidate.job_role)
            ):
                kept.append(row)
        return kept


# ==================== Paginator ===================== #
def resolve_page(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    """Absent or falsy values fall back to page 1 / limit 10."""
    return (page or DEFAULT_PAGE, limit or DEFAULT_LIMIT)


def to_offset(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    """Convert ``(page, limit)`` into ``(skip, take)``."""
    page, limit = resolve_page(page, limit)
    return ((page - 1) * limit, limit)


def pagination_meta(total: int, page: Optional[int], limit: Optional[int]) -> dict[str, int]:
    page, limit = resolve_page(page, limit)
    total_pages = ceil(total / limit) if total else 0
    return {"total": total, "totalPages": total_pages, "page": page, "limit": limit}


def paginated(data: list, total: int, page: Optional[int], limit: Optional[int]) -> dict:
    """Canonical list payload: ``{"data": [...], "meta": {...}}``."""
    return {"data": data, "meta": pagination_meta(total, page, limit)}


async def fetch_page(
    session: AsyncSession,
    stmt: Select,
    page: Optional[int],
    limit: Optional[int],
) -> tuple[list, int]:
    """
    Run ``stmt`` for one page and count the full result set.

    Returns the ORM entities of the page and the total row count.
    """
    count_query = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await session.execute(count_query)).scalar_one()

    skip, take = to_offset(page, limit)
    result = await session.execute(stmt.offset(skip).limit(take))
    return list(result.scalars().unique().all()), total
