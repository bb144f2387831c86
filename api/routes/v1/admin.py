"""Administration endpoints. ADMIN accounts only."""

from fastapi import APIRouter, Depends, Path

from api.dependencies import get_admin_service, query_model, require_admin
from api.schemas.admin import AdminCompaniesQuery, InviteCompaniesRequest
from api.schemas.common import ListQuery
from api.services import AdminService

router = APIRouter(
    prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


@router.get("/companies", summary="List Companies")
async def get_companies(
    query: AdminCompaniesQuery = Depends(query_model(AdminCompaniesQuery)),
    service: AdminService = Depends(get_admin_service),
):
    return await service.get_companies(query)


@router.post(
    "/companies/invite",
    summary="Invite Companies",
    description="Invite companies to a club by email. Addresses that cannot be invited are reported, not rejected.",
)
async def invite_companies(
    body: InviteCompaniesRequest,
    service: AdminService = Depends(get_admin_service),
):
    return await service.invite_companies(body)


@router.delete("/companies/{company_id}", summary="Delete Company")
async def delete_company(
    company_id: str = Path(..., description="Company ID"),
    service: AdminService = Depends(get_admin_service),
):
    return await service.delete_company(company_id)


@router.get("/companies/{company_id}/hired", summary="List Company Hires")
async def get_company_hired_players(
    company_id: str = Path(..., description="Company ID"),
    query: ListQuery = Depends(query_model(ListQuery)),
    service: AdminService = Depends(get_admin_service),
):
    return await service.get_company_hired_players(company_id, query)


@router.delete("/players/{player_id}", summary="Delete Player")
async def delete_player(
    player_id: str = Path(..., description="Player ID"),
    service: AdminService = Depends(get_admin_service),
):
    return await service.delete_player(player_id)
