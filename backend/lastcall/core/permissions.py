"""Role & permission helpers for organization-scoped resources."""
from typing import Optional

from lastcall.core.context import RequestContext
from lastcall.core.exceptions import NotFoundError, UnauthorizedError
from lastcall.schemas.employee import Employee
from lastcall.schemas.organization import Organization
from lastcall.store import DocumentStore, paths


async def get_employee(store: DocumentStore, organization_id: str, user_id: str) -> Optional[Employee]:
    return await store.read(paths.employee(organization_id, user_id), Employee)


async def ensure_org_exists(store: DocumentStore, organization_id: str) -> Organization:
    org = await store.read(paths.organization(organization_id), Organization)
    if org is None:
        raise NotFoundError("Organization not found")
    return org


def is_admin_or_owner(employee: Optional[Employee]) -> bool:
    if employee is None:
        return False
    return employee.is_admin


async def require_member(store: DocumentStore, ctx: RequestContext, organization_id: str) -> Employee:
    """Ensure the caller is an employee of the organization. Raises otherwise."""
    await ensure_org_exists(store, organization_id)
    employee = await get_employee(store, organization_id, ctx.user_id)
    if employee is None:
        raise UnauthorizedError("Not a member of organization")
    return employee


async def require_admin(store: DocumentStore, ctx: RequestContext, organization_id: str) -> Employee:
    """Ensure the caller holds an admin-level (Owner or admin) employee record."""
    employee = await require_member(store, ctx, organization_id)
    if not is_admin_or_owner(employee):
        raise UnauthorizedError("Insufficient role")
    return employee


async def require_owner(store: DocumentStore, ctx: RequestContext, organization_id: str) -> Employee:
    employee = await require_member(store, ctx, organization_id)
    if not employee.is_owner:
        raise UnauthorizedError("Only the organization owner can do this")
    return employee
