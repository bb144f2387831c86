"""
Company endpoints.

Profile onboarding, job postings, the partner questionnaire and the
shortlist/hire pipeline for COMPANY accounts.
"""

from fastapi import APIRouter, Depends, Path

from api.dependencies import (
    AuthenticatedUser,
    FormPayload,
    form_model,
    get_company_service,
    get_job_service,
    get_recruitment_service,
    query_model,
    require_company,
)
from api.schemas.common import ListQuery
from api.schemas.company import (
    CompanyCompleteProfileForm,
    CompanyUpdateProfileForm,
    GetPlayersQuery,
    HireCandidateRequest,
    PostPartnerAnswersRequest,
    RemoveShortlistedPlayerRequest,
    ShortlistPlayerRequest,
)
from api.schemas.jobs import (
    CreateJobRequest,
    GetJobsQuery,
    JobsWithShortlistedQuery,
    UpdateJobRequest,
)
from api.services import CompanyService, JobService, RecruitmentService

router = APIRouter(prefix="/company", tags=["company"])


# ==================== Profile ===================== #
@router.get("/profile", summary="Get Company Profile")
async def get_profile(
    current_user: AuthenticatedUser = Depends(require_company),
    service: CompanyService = Depends(get_company_service),
):
    return await service.get_profile(current_user.profile_id)


@router.put(
    "/profile",
    summary="Complete Onboarding Step",
    description="Submit one onboarding step as multipart form data.",
)
async def complete_profile(
    form: FormPayload = Depends(form_model(CompanyCompleteProfileForm)),
    current_user: AuthenticatedUser = Depends(require_company),
    service: CompanyService = Depends(get_company_service),
):
    return await service.complete_profile(current_user.profile_id, form.data, form.files)


@router.patch("/profile", summary="Update Company Profile")
async def update_profile(
    form: FormPayload = Depends(form_model(CompanyUpdateProfileForm)),
    current_user: AuthenticatedUser = Depends(require_company),
    service: CompanyService = Depends(get_company_service),
):
    return await service.update_profile(current_user.profile_id, form.data, form.files)


@router.get("/dashboard", summary="Get Company Dashboard")
async def get_dashboard(
    current_user: AuthenticatedUser = Depends(require_company),
    service: CompanyService = Depends(get_company_service),
):
    return await service.get_dashboard(current_user.profile_id)


@router.get(
    "/players",
    summary="List Players",
    description="Players and supporters approved in a club, with in-memory profile filters.",
)
async def get_players(
    query: GetPlayersQuery = Depends(query_model(GetPlayersQuery)),
    current_user: AuthenticatedUser = Depends(require_company),
    service: CompanyService = Depends(get_company_service),
):
    return await service.get_players(current_user.profile_id, current_user.user_id, query)


# ==================== Jobs ===================== #
@router.get("/jobs", summary="List Company Jobs")
async def get_jobs(
    query: GetJobsQuery = Depends(query_model(GetJobsQuery)),
    current_user: AuthenticatedUser = Depends(require_company),
    service: JobService = Depends(get_job_service),
):
    return await service.get_all_jobs(current_user.profile_id, query)


@router.post("/jobs", status_code=201, summary="Create Job")
async def create_job(
    body: CreateJobRequest,
    current_user: AuthenticatedUser = Depends(require_company),
    service: JobService = Depends(get_job_service),
):
    return await service.create_job(current_user.profile_id, body)


@router.get("/jobs/{job_id}", summary="Get Job Details")
async def get_job(
    job_id: str = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_company),
    service: JobService = Depends(get_job_service),
):
    return await service.get_job_by_id(current_user.profile_id, job_id)


@router.patch("/jobs/{job_id}", summary="Update Job")
async def update_job(
    body: UpdateJobRequest,
    job_id: str = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_company),
    service: JobService = Depends(get_job_service),
):
    return await service.update_job(current_user.profile_id, job_id, body)


@router.delete("/jobs/{job_id}", summary="Delete Job")
async def delete_job(
    job_id: str = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_company),
    service: JobService = Depends(get_job_service),
):
    return await service.delete_job(current_user.profile_id, job_id)


# ==================== Partner questionnaire ===================== #
@router.get("/questions", summary="Get Partner Questions")
async def get_questions(
    current_user: AuthenticatedUser = Depends(require_company),
    service: CompanyService = Depends(get_company_service),
):
    return await service.get_partner_questions()


@router.post(
    "/answer",
    summary="Submit Partner Answers",
    description="Submit answers and wait for the partner score. Blocks while the score is polled.",
)
async def post_answers(
    body: PostPartnerAnswersRequest,
    current_user: AuthenticatedUser = Depends(require_company),
    service: CompanyService = Depends(get_company_service),
):
    return await service.post_partner_answers(current_user.profile_id, body)


# ==================== Shortlist ===================== #
@router.post("/shortlist", summary="Shortlist Candidate")
async def shortlist_player(
    body: ShortlistPlayerRequest,
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.shortlist_player(current_user.profile_id, body)


@router.delete("/shortlist/remove", summary="Remove Candidate From Shortlist")
async def remove_shortlisted_player(
    body: RemoveShortlistedPlayerRequest,
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.remove_shortlisted_player(current_user.profile_id, body)


@router.get("/shortlisted", summary="List Jobs With Shortlisted Candidates")
async def get_jobs_with_shortlisted(
    query: JobsWithShortlistedQuery = Depends(query_model(JobsWithShortlistedQuery)),
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.get_jobs_with_shortlisted_players(current_user.profile_id, query)


@router.get("/shortlisted/{job_id}", summary="List Shortlisted Candidates For Job")
async def get_shortlisted_players(
    job_id: str = Path(..., description="Job ID"),
    query: ListQuery = Depends(query_model(ListQuery)),
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.get_shortlisted_players(current_user.profile_id, job_id, query)


@router.delete("/shortlisted/{job_id}", summary="Clear Shortlist For Job")
async def remove_all_shortlisted(
    job_id: str = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.remove_all_shortlisted_under_job(current_user.profile_id, job_id)


# ==================== Hire ===================== #
@router.post("/hire", summary="Hire Candidate")
async def hire_candidate(
    body: HireCandidateRequest,
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.hire_candidate(current_user.profile_id, body)


@router.post("/hire/remove", summary="Unhire Candidate")
async def unhire_candidate(
    body: HireCandidateRequest,
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.unhire_candidate(current_user.profile_id, body)


@router.get("/hired", summary="List Jobs With Hired Candidates")
async def get_jobs_with_hired(
    query: ListQuery = Depends(query_model(ListQuery)),
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.get_jobs_with_hired_players(current_user.profile_id, query)


@router.get("/hired/{job_id}", summary="List Hired Candidates For Job")
async def get_hired_players(
    job_id: str = Path(..., description="Job ID"),
    query: ListQuery = Depends(query_model(ListQuery)),
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.get_hired_players(current_user.profile_id, job_id, query)


@router.delete("/hired/{job_id}", summary="Unhire All Candidates For Job")
async def remove_all_hired(
    job_id: str = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_company),
    service: RecruitmentService = Depends(get_recruitment_service),
):
    return await service.remove_all_hired_under_job(current_user.profile_id, job_id)
