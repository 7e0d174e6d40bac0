"""
Employee endpoints for an organization.
"""
from fastapi import APIRouter, Depends, status

from lastcall.core.context import RequestContext
from lastcall.core.deps import get_current_user, get_store
from lastcall.schemas.employee import Employee, EmployeeRolesUpdate, EmployeeRoleUpdate
from lastcall.services.directory import OrganizationDirectory
from lastcall.store import DocumentStore

router = APIRouter()


@router.get("", response_model=list[Employee])
async def list_employees(
    org_id: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    List employees of an organization.
    Requires org membership.
    """
    return await OrganizationDirectory(store).list_employees(ctx, org_id)


@router.get("/{user_id}", response_model=Employee)
async def get_employee(
    org_id: str,
    user_id: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    return await OrganizationDirectory(store).get_employee(ctx, org_id, user_id)


@router.put("/{user_id}/roles", response_model=Employee)
async def assign_employee_roles(
    org_id: str,
    user_id: str,
    data: EmployeeRolesUpdate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Replace the role names an employee can work.
    Requires admin role.
    """
    return await OrganizationDirectory(store).assign_roles(ctx, org_id, user_id, data.roles)


@router.put("/{user_id}/role", response_model=Employee)
async def set_employee_role(
    org_id: str,
    user_id: str,
    data: EmployeeRoleUpdate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Promote or demote an employee. The owner cannot be changed."""
    return await OrganizationDirectory(store).set_employee_role(ctx, org_id, user_id, data.role)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_employee(
    org_id: str,
    user_id: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    await OrganizationDirectory(store).remove_employee(ctx, org_id, user_id)
    return None
