"""
User profile and availability endpoints.
"""
from fastapi import APIRouter, Depends

from lastcall.core.context import RequestContext
from lastcall.core.deps import get_current_user, get_store
from lastcall.schemas.availability import AvailabilityEntry, AvailabilityUpdate
from lastcall.schemas.employee import ProfileUpdate, UserProfile
from lastcall.services.availability import AvailabilityService
from lastcall.services.directory import OrganizationDirectory
from lastcall.store import DocumentStore

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_my_profile(
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Get the caller's profile."""
    return await OrganizationDirectory(store).require_profile(ctx.user_id)


@router.put("/me", response_model=UserProfile)
async def update_my_profile(
    data: ProfileUpdate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Create or update the caller's profile."""
    return await OrganizationDirectory(store).upsert_profile(ctx, data)


@router.get("/me/availability", response_model=list[AvailabilityEntry])
async def get_my_availability(
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    return await AvailabilityService(store).get_availability(ctx)


@router.put("/me/availability", response_model=list[AvailabilityEntry])
async def set_my_availability(
    data: AvailabilityUpdate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Replace the caller's weekly availability."""
    profile = await AvailabilityService(store).set_availability(ctx, data.availability)
    return profile.availability


@router.get("/{user_id}/availability", response_model=list[AvailabilityEntry])
async def get_user_availability(
    user_id: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Get another user's availability.
    Requires admin role in an organization the user works for.
    """
    return await AvailabilityService(store).get_availability(ctx, user_id)
