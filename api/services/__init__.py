"""
API Services Layer.

One service class per area. Each owns its session handling and maps
failures to ``core.exceptions`` errors; routes stay thin.
"""

from api.services.base import BaseService, success
from api.services.jobs import JobService
from api.services.recruitment import RecruitmentService
from api.services.company import CompanyService
from api.services.players import PlayerService
from api.services.admin import AdminService

__all__ = [
    "BaseService",
    "success",
    "JobService",
    "RecruitmentService",
    "CompanyService",
    "PlayerService",
    "AdminService",
]
