"""
Version 1 API routers.
"""
from fastapi import APIRouter

from lastcall.api.v1 import employees, invites, onboarding, organizations, schedules, users

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
api_router.include_router(
    invites.router, prefix="/organizations/{org_id}/invites", tags=["invites"]
)
api_router.include_router(invites.public_router, tags=["invites"])
api_router.include_router(onboarding.router, prefix="/organizations/{org_id}", tags=["onboarding"])
api_router.include_router(
    employees.router, prefix="/organizations/{org_id}/employees", tags=["employees"]
)
api_router.include_router(
    schedules.router, prefix="/organizations/{org_id}/schedules", tags=["schedules"]
)
