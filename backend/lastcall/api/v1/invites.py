"""
Invite link endpoints.

`router` holds the admin operations under an organization; `public_router`
serves the unauthenticated invite URL check.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from lastcall.core.context import RequestContext
from lastcall.core.deps import get_current_user, get_store
from lastcall.schemas.organization import InviteCreate, InviteLinkResponse, InviteValidationResponse
from lastcall.services.invites import InviteTokenService, build_invite_url
from lastcall.store import DocumentStore

router = APIRouter()
public_router = APIRouter()


@router.post("", response_model=InviteLinkResponse, status_code=status.HTTP_201_CREATED)
async def create_invite(
    org_id: str,
    data: Optional[InviteCreate] = None,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Issue an invite link.
    Requires admin role.
    """
    expires_in_days = data.expires_in_days if data else None
    link = await InviteTokenService(store).issue(ctx, org_id, expires_in_days)
    return InviteLinkResponse(
        token=link.token,
        created_at=link.created_at,
        expires_at=link.expires_at,
        invite_url=build_invite_url(org_id, link.token),
    )


@router.delete("/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_invite(
    org_id: str,
    token: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    await InviteTokenService(store).revoke(ctx, org_id, token)
    return None


@public_router.get("/invite", response_model=InviteValidationResponse)
async def validate_invite(
    org_id: Optional[str] = Query(None, alias="orgId"),
    token: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_store)
):
    """Check an invite link before asking to join."""
    result = await InviteTokenService(store).validate(org_id, token)
    org = result.organization if result.valid else None
    return InviteValidationResponse(
        valid=result.valid,
        reason=result.reason,
        organization_id=org.id if org else None,
        organization_name=org.name if org else None,
        organization_description=org.description if org else None,
    )
