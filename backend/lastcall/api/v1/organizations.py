"""
Organization and role-name endpoints.
"""
from fastapi import APIRouter, Depends, status

from lastcall.core.context import RequestContext
from lastcall.core.deps import get_current_user, get_store
from lastcall.schemas.employee import OrgRole
from lastcall.schemas.organization import (
    Organization, OrganizationCreate, OrganizationSummary, OrganizationUpdate, RoleCreate, RoleRename,
)
from lastcall.services.directory import OrganizationDirectory
from lastcall.store import DocumentStore

router = APIRouter()


def org_to_summary(org: Organization, user_role: str) -> OrganizationSummary:
    """Convert an Organization record to the member-facing summary."""
    return OrganizationSummary(
        id=org.id,
        name=org.name,
        description=org.description,
        roles=org.roles,
        owner_id=org.owner_id,
        user_role=user_role,
    )


@router.get("", response_model=list[OrganizationSummary])
async def list_organizations(
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """List organizations the caller works for."""
    return await OrganizationDirectory(store).list_my_organizations(ctx)


@router.post("", response_model=OrganizationSummary, status_code=status.HTTP_201_CREATED)
async def create_organization(
    data: OrganizationCreate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Create an organization.
    The caller becomes its owner.
    """
    org = await OrganizationDirectory(store).create_organization(
        ctx, data.name, data.description, data.roles
    )
    return org_to_summary(org, OrgRole.OWNER.value)


@router.get("/{org_id}", response_model=OrganizationSummary)
async def get_organization(
    org_id: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    return await OrganizationDirectory(store).get_summary(ctx, org_id)


@router.patch("/{org_id}", response_model=OrganizationSummary)
async def update_organization(
    org_id: str,
    data: OrganizationUpdate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Update the organization's name or description.
    Only the owner can update.
    """
    org = await OrganizationDirectory(store).update_organization(ctx, org_id, data)
    return org_to_summary(org, OrgRole.OWNER.value)


@router.delete("/{org_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_organization(
    org_id: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Delete an organization with its employees, requests and schedules.
    Only the owner can delete.
    """
    await OrganizationDirectory(store).delete_organization(ctx, org_id)
    return None


@router.post("/{org_id}/roles", response_model=list[str], status_code=status.HTTP_201_CREATED)
async def add_role(
    org_id: str,
    data: RoleCreate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    org = await OrganizationDirectory(store).add_role(ctx, org_id, data.name)
    return org.roles


@router.patch("/{org_id}/roles/{role}", response_model=list[str])
async def rename_role(
    org_id: str,
    role: str,
    data: RoleRename,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Rename a role. Employees holding it keep it under the new name."""
    org = await OrganizationDirectory(store).rename_role(ctx, org_id, role, data.name)
    return org.roles


@router.delete("/{org_id}/roles/{role}", response_model=list[str])
async def remove_role(
    org_id: str,
    role: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Remove a role name. It is also unassigned from every employee."""
    org = await OrganizationDirectory(store).remove_role(ctx, org_id, role)
    return org.roles
