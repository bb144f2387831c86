"""
Player and supporter endpoints.

The same router is mounted under ``/player`` and ``/supporter``; browsing all
jobs is reserved for PLAYER accounts.
"""

from fastapi import APIRouter, Depends, Path

from api.dependencies import (
    AuthenticatedUser,
    FormPayload,
    form_model,
    get_player_service,
    query_model,
    require_candidate,
    require_player,
)
from api.schemas.common import ListQuery
from api.schemas.jobs import ApplyJobForm, JobTrackingQuery, PlayerJobsQuery
from api.schemas.players import PlayerCompleteProfileForm, PlayerUpdateProfileForm
from api.services import PlayerService

router = APIRouter()


@router.get("/companies", summary="List Companies")
async def get_companies(
    query: ListQuery = Depends(query_model(ListQuery)),
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.get_companies(current_user.user_id, query)


@router.get("/profile", summary="Get Profile")
async def get_profile(
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.get_profile(current_user.profile_id)


@router.put(
    "/profile",
    summary="Complete Onboarding Step",
    description="Submit the next pending onboarding step as multipart form data.",
)
async def complete_profile(
    form: FormPayload = Depends(form_model(PlayerCompleteProfileForm)),
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.complete_profile(current_user.profile_id, form.data, form.files)


@router.patch("/profile", summary="Update Profile")
async def update_profile(
    form: FormPayload = Depends(form_model(PlayerUpdateProfileForm)),
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.update_profile(current_user.profile_id, form.data, form.files)


@router.get("/company/{company_id}/jobs", summary="List Jobs Of A Company")
async def get_jobs_by_company(
    company_id: str = Path(..., description="Company ID"),
    query: ListQuery = Depends(query_model(ListQuery)),
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.get_jobs_by_company(current_user.profile_id, company_id, query)


@router.get("/jobs", summary="Browse Jobs")
async def get_all_jobs(
    query: PlayerJobsQuery = Depends(query_model(PlayerJobsQuery)),
    current_user: AuthenticatedUser = Depends(require_player),
    service: PlayerService = Depends(get_player_service),
):
    return await service.get_all_jobs(current_user.profile_id, query)


@router.get("/jobs/tracking", summary="Track Applications")
async def get_jobs_tracking(
    query: JobTrackingQuery = Depends(query_model(JobTrackingQuery)),
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.get_jobs_tracking(current_user.profile_id, query)


@router.get("/jobs/{job_id}", summary="Get Job Details")
async def get_job(
    job_id: str = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.get_job(current_user.profile_id, job_id)


@router.post("/jobs/bookmarks/{job_id}", summary="Toggle Job Bookmark")
async def toggle_bookmark(
    job_id: str = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.toggle_job_bookmark(current_user.profile_id, job_id)


@router.get("/dashboard", summary="Get Dashboard")
async def get_dashboard(
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.get_dashboard(current_user.profile_id)


@router.post(
    "/jobs/apply/{job_id}",
    status_code=201,
    summary="Apply For Job",
    description="Multipart form with a required ``resume`` and optional ``applicationLetter``.",
)
async def apply_for_job(
    job_id: str = Path(..., description="Job ID"),
    form: FormPayload = Depends(form_model(ApplyJobForm)),
    current_user: AuthenticatedUser = Depends(require_candidate),
    service: PlayerService = Depends(get_player_service),
):
    return await service.apply_for_job(current_user.profile_id, job_id, form.data, form.files)
