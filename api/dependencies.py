"""FastAPI dependencies for dependency injection."""

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, TypeVar

from fastapi import Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.datastructures import UploadFile

from api.schemas.common import ListQuery
from api.services import (
    AdminService,
    CompanyService,
    JobService,
    PlayerService,
    RecruitmentService,
)
from core.query import normalize_query
from core.security import TokenError, TokenExpiredError, decode_access_token
from database.engine import get_db
from database.models.users import User, UserStatus, UserType

ModelT = TypeVar("ModelT", bound=BaseModel)

security = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """The caller, resolved from the bearer token."""

    user_id: str
    user_type: UserType
    name: Optional[str] = None
    profile_id: Optional[str] = None

    @property
    def is_candidate(self) -> bool:
        return self.user_type in (UserType.PLAYER, UserType.SUPPORTER)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _resolve_user(db: AsyncSession, token: str) -> AuthenticatedUser:
    try:
        payload = decode_access_token(token)
    except TokenExpiredError:
        raise _unauthorized("Token has expired")
    except TokenError:
        raise _unauthorized("Invalid authentication credentials")

    user = await db.scalar(
        select(User)
        .where(User.id == payload["sub"])
        .options(selectinload(User.company), selectinload(User.player))
    )
    if not user or user.status != UserStatus.ACTIVE:
        raise _unauthorized("User not found or inactive")

    if user.user_type == UserType.COMPANY:
        profile_id = user.company.id if user.company else None
    elif user.user_type in (UserType.PLAYER, UserType.SUPPORTER):
        profile_id = user.player.id if user.player else None
    else:
        profile_id = None

    return AuthenticatedUser(
        user_id=user.id, user_type=user.user_type, name=user.name, profile_id=profile_id
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """Require a valid bearer token; the caller is also stored on ``request.state``."""
    if credentials is None:
        raise _unauthorized("Authentication required")
    current = await _resolve_user(db, credentials.credentials)
    request.state.user = current
    return current


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[AuthenticatedUser]:
    """
    Get current user if authenticated, otherwise return None.
    Useful for public endpoints that personalise their answer for signed-in callers.
    """
    if credentials is None:
        return None
    try:
        current = await _resolve_user(db, credentials.credentials)
    except HTTPException:
        return None
    request.state.user = current
    return current


def require_user_types(*user_types: UserType) -> Callable:
    """Dependency factory allowing only the given roles, with a profile attached."""

    async def checker(
        current_user: AuthenticatedUser = Depends(get_current_user),
    ) -> AuthenticatedUser:
        if current_user.user_type not in user_types:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have access to this resource",
            )
        if current_user.user_type != UserType.ADMIN and not current_user.profile_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Profile not found for this account",
            )
        return current_user

    return checker


require_company = require_user_types(UserType.COMPANY)
require_candidate = require_user_types(UserType.PLAYER, UserType.SUPPORTER)
require_player = require_user_types(UserType.PLAYER)
require_admin = require_user_types(UserType.ADMIN)


# ==================== Request models ===================== #
def _validate(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())


def query_model(model: type[ListQuery]) -> Callable:
    """
    Dependency factory validating the query string with ``model``.

    Multi-valued keys (``k=x`` or ``k[]=x&k[]=y``) are normalised first.
    """

    def dependency(request: Request) -> ListQuery:
        params = normalize_query(request.query_params, model.array_fields, model.upper_fields)
        return _validate(model, params)

    return dependency


@dataclass
class FormPayload(Generic[ModelT]):
    """Validated multipart fields plus the uploaded files keyed by field name."""

    data: ModelT
    files: dict[str, list[UploadFile]] = field(default_factory=dict)


def form_model(model: type[ModelT]) -> Callable:
    """
    Dependency factory reading a multipart form into ``model``.

    Repeated fields and ``k[]`` spellings become lists; files are kept aside.
    """

    async def dependency(request: Request) -> FormPayload:
        form = await request.form()
        values: dict[str, Any] = {}
        files: dict[str, list[UploadFile]] = {}

        for raw_key in set(form.keys()):
            key = raw_key[:-2] if raw_key.endswith("[]") else raw_key
            for item in form.getlist(raw_key):
                if isinstance(item, UploadFile):
                    if item.filename:
                        files.setdefault(key, []).append(item)
                    continue
                if raw_key.endswith("[]") or key in values:
                    existing = values.get(key)
                    if existing is None:
                        values[key] = [item]
                    elif isinstance(existing, list):
                        existing.append(item)
                    else:
                        values[key] = [existing, item]
                else:
                    values[key] = item

        return FormPayload(data=_validate(model, values), files=files)

    return dependency


# ==================== Services ===================== #
def get_job_service() -> JobService:
    return JobService()


def get_recruitment_service() -> RecruitmentService:
    return RecruitmentService()


def get_company_service() -> CompanyService:
    return CompanyService()


def get_player_service() -> PlayerService:
    return PlayerService()


def get_admin_service() -> AdminService:
    return AdminService()
