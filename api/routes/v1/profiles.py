"""
Public profile endpoints.

Readable without a token. A signed-in viewer also gets the open chat id,
and the visit is recorded on the viewer's recently viewed list.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Path

from api.dependencies import (
    AuthenticatedUser,
    get_company_service,
    get_optional_user,
    get_player_service,
    query_model,
)
from api.schemas.common import ListQuery
from api.services import CompanyService, PlayerService
from database.models.users import UserType

router = APIRouter(prefix="/profile", tags=["profiles"])


@router.get("/company/{company_id}", summary="Get Public Company Profile")
async def get_company_profile(
    background_tasks: BackgroundTasks,
    company_id: str = Path(..., description="Company ID"),
    viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
    service: CompanyService = Depends(get_company_service),
):
    viewer_user_id = viewer.user_id if viewer and viewer.is_candidate else None
    result = await service.get_public_profile(company_id, viewer_user_id)
    if viewer_user_id and viewer.profile_id:
        background_tasks.add_task(service.track_company_view, viewer.profile_id, company_id)
    return result


for kind in ("player", "supporter"):

    @router.get(f"/{kind}", summary=f"List Public {kind.title()} Profiles", tags=[kind])
    async def get_players(
        query: ListQuery = Depends(query_model(ListQuery)),
        service: PlayerService = Depends(get_player_service),
    ):
        return await service.get_public_players(query)

    @router.get(f"/{kind}/list", summary=f"List {kind.title()} Names", tags=[kind])
    async def get_players_list(
        query: ListQuery = Depends(query_model(ListQuery)),
        service: PlayerService = Depends(get_player_service),
    ):
        return await service.get_public_players_list(query)

    @router.get(f"/{kind}/{{player_id}}", summary=f"Get Public {kind.title()} Profile", tags=[kind])
    async def get_player_profile(
        background_tasks: BackgroundTasks,
        player_id: str = Path(..., description="Player ID"),
        viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
        service: PlayerService = Depends(get_player_service),
    ):
        is_company = viewer is not None and viewer.user_type == UserType.COMPANY
        result = await service.get_public_profile(
            player_id, viewer.user_id if is_company else None
        )
        if is_company and viewer.profile_id:
            background_tasks.add_task(service.track_player_view, viewer.profile_id, player_id)
        return result
