"""
Organization directory.

Owns Organization, Employee and user profile records: organization creation
and deletion, the role-name set, employee role assignment, promotion and
removal.
"""
import logging
import uuid
from typing import Iterable, Optional

from lastcall.core.config import settings
from lastcall.core.context import RequestContext
from lastcall.core.exceptions import ConflictError, NotFoundError, ValidationError
from lastcall.core.permissions import (
    ensure_org_exists, get_employee, require_admin, require_member, require_owner,
)
from lastcall.schemas.employee import Employee, OrgRole, ProfileUpdate, UserProfile
from lastcall.schemas.organization import Organization, OrganizationSummary, OrganizationUpdate
from lastcall.store import DocumentStore, paths

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """Generate a 15-character document id."""
    return uuid.uuid4().hex[:15]


def _clean_role_names(names: Iterable[str]) -> list[str]:
    cleaned: list[str] = []
    for name in names:
        name = (name or "").strip()
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


def _with(items: list[str], value: str) -> list[str]:
    return items if value in items else [*items, value]


def _without(items: list[str], value: str) -> list[str]:
    return [item for item in items if item != value]


class OrganizationDirectory:
    """Organization, employee and profile records."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return await self.store.read(paths.user(user_id), UserProfile)

    async def require_profile(self, user_id: str) -> UserProfile:
        profile = await self.get_profile(user_id)
        if profile is None:
            raise NotFoundError("User profile not found")
        return profile

    async def upsert_profile(self, ctx: RequestContext, data: ProfileUpdate) -> UserProfile:
        """Create the caller's profile or update its name fields."""
        profile = await self.get_profile(ctx.user_id) or UserProfile(user_id=ctx.user_id)
        profile.first_name = data.first_name.strip()
        profile.last_name = data.last_name.strip()
        if ctx.email:
            profile.email = ctx.email
        await self.store.write(paths.user(ctx.user_id), profile)
        return profile

    async def add_membership(self, user_id: str, org_id: str, admin: bool = False) -> UserProfile:
        """Record org membership on the profile. Safe to repeat."""
        profile = await self.get_profile(user_id) or UserProfile(user_id=user_id)
        profile.employee_org_ids = _with(profile.employee_org_ids, org_id)
        if admin:
            profile.admin_org_ids = _with(profile.admin_org_ids, org_id)
        await self.store.write(paths.user(user_id), profile)
        return profile

    async def remove_membership(self, user_id: str, org_id: str, admin_only: bool = False) -> None:
        profile = await self.get_profile(user_id)
        if profile is None:
            return
        if not admin_only:
            profile.employee_org_ids = _without(profile.employee_org_ids, org_id)
        profile.admin_org_ids = _without(profile.admin_org_ids, org_id)
        await self.store.write(paths.user(user_id), profile)

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    async def create_organization(
        self,
        ctx: RequestContext,
        name: str,
        description: Optional[str] = None,
        roles: Optional[list[str]] = None,
    ) -> Organization:
        """
        Create an organization. The caller becomes its Owner.

        Roles default to the configured set so no organization starts
        without one.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Organization name is required")

        role_names = _clean_role_names(roles or []) or _clean_role_names(settings.DEFAULT_ROLES)
        if not role_names:
            raise ValidationError("An organization needs at least one role")

        org = Organization(
            id=generate_id(),
            name=name,
            description=description,
            roles=role_names,
            owner_id=ctx.user_id,
        )
        await self.store.create(paths.organization(org.id), org)

        profile = await self.get_profile(ctx.user_id)
        owner = Employee(
            user_id=ctx.user_id,
            name=profile.display_name if profile else "",
            email=ctx.email or (profile.email if profile else None),
            role=OrgRole.OWNER.value,
        )
        await self.store.create(paths.employee(org.id, ctx.user_id), owner)
        await self.add_membership(ctx.user_id, org.id, admin=True)

        logger.info(f"Organization created: id={org.id}, owner={ctx.user_id}")
        return org

    async def get_organization(self, org_id: str) -> Organization:
        return await ensure_org_exists(self.store, org_id)

    async def get_summary(self, ctx: RequestContext, org_id: str) -> OrganizationSummary:
        """Organization details for a member of it."""
        employee = await require_member(self.store, ctx, org_id)
        org = await self.get_organization(org_id)
        return OrganizationSummary(
            id=org.id,
            name=org.name,
            description=org.description,
            roles=org.roles,
            owner_id=org.owner_id,
            user_role=employee.role,
        )

    async def list_my_organizations(self, ctx: RequestContext) -> list[OrganizationSummary]:
        profile = await self.get_profile(ctx.user_id)
        if profile is None:
            return []
        items = []
        for org_id in profile.employee_org_ids:
            org = await self.store.read(paths.organization(org_id), Organization)
            employee = await get_employee(self.store, org_id, ctx.user_id)
            if org is None or employee is None:
                continue
            items.append(OrganizationSummary(
                id=org.id,
                name=org.name,
                description=org.description,
                roles=org.roles,
                owner_id=org.owner_id,
                user_role=employee.role,
            ))
        return items

    async def update_organization(
        self, ctx: RequestContext, org_id: str, changes: OrganizationUpdate
    ) -> Organization:
        """
        Rename an organization or change its description. Owner only.

        Only fields present in `changes` are applied; an explicit null or
        blank description clears it.
        """
        await require_owner(self.store, ctx, org_id)
        org = await self.get_organization(org_id)

        fields = {}
        if "name" in changes.model_fields_set:
            name = (changes.name or "").strip()
            if not name:
                raise ValidationError("Organization name cannot be empty")
            org.name = fields["name"] = name
        if "description" in changes.model_fields_set:
            org.description = fields["description"] = (changes.description or "").strip() or None

        if fields:
            await self.store.update(paths.organization(org_id), fields)
            logger.info(f"Organization updated: id={org_id}, fields={sorted(fields)}")
        return org

    async def delete_organization(self, ctx: RequestContext, org_id: str) -> int:
        """
        Delete an organization with its employees, pending requests and
        schedules, and drop it from every member's profile.
        """
        await require_owner(self.store, ctx, org_id)
        for employee in await self.list_employee_records(org_id):
            await self.remove_membership(employee.user_id, org_id)
        deleted = await self.store.delete_tree(paths.organization(org_id))
        logger.info(f"Organization deleted: id={org_id}, by={ctx.user_id}, documents={deleted}")
        return deleted

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def add_role(self, ctx: RequestContext, org_id: str, name: str) -> Organization:
        await require_admin(self.store, ctx, org_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Role name is required")

        org = await self.get_organization(org_id)
        if name in org.roles:
            raise ConflictError("This role already exists")
        org.roles = [*org.roles, name]
        await self.store.update(paths.organization(org_id), {"roles": org.roles})
        return org

    async def rename_role(
        self, ctx: RequestContext, org_id: str, name: str, new_name: str
    ) -> Organization:
        """Rename a role in place and on every employee that holds it."""
        await require_admin(self.store, ctx, org_id)
        new_name = (new_name or "").strip()
        if not new_name:
            raise ValidationError("Role name cannot be empty")

        org = await self.get_organization(org_id)
        if name not in org.roles:
            raise NotFoundError("Role not found")
        if new_name == name:
            return org
        if new_name in org.roles:
            raise ConflictError("A role with this name already exists in this organization")

        org.roles = [new_name if role == name else role for role in org.roles]
        await self.store.update(paths.organization(org_id), {"roles": org.roles})
        for employee in await self.list_employee_records(org_id):
            if name in employee.roles:
                employee.roles = [new_name if role == name else role for role in employee.roles]
                await self.store.write(paths.employee(org_id, employee.user_id), employee)
        logger.info(f"Role renamed: org={org_id}, {name!r} -> {new_name!r}")
        return org

    async def remove_role(self, ctx: RequestContext, org_id: str, name: str) -> Organization:
        """Remove a role name and unassign it from every employee."""
        await require_admin(self.store, ctx, org_id)
        org = await self.get_organization(org_id)
        if name not in org.roles:
            raise NotFoundError("Role not found")
        if len(org.roles) == 1:
            raise ValidationError("An organization needs at least one role")

        org.roles = _without(org.roles, name)
        await self.store.update(paths.organization(org_id), {"roles": org.roles})
        for employee in await self.list_employee_records(org_id):
            if name in employee.roles:
                employee.roles = _without(employee.roles, name)
                await self.store.write(paths.employee(org_id, employee.user_id), employee)
        return org

    # ------------------------------------------------------------------
    # Employees
    # ------------------------------------------------------------------

    async def list_employee_records(self, org_id: str) -> list[Employee]:
        return await self.store.list_as(paths.employees(org_id), Employee)

    async def list_employees(self, ctx: RequestContext, org_id: str) -> list[Employee]:
        await require_member(self.store, ctx, org_id)
        return await self.list_employee_records(org_id)

    async def admin_ids(self, org_id: str) -> list[str]:
        return [e.user_id for e in await self.list_employee_records(org_id) if e.is_admin]

    async def get_employee(self, ctx: RequestContext, org_id: str, user_id: str) -> Employee:
        await require_member(self.store, ctx, org_id)
        employee = await get_employee(self.store, org_id, user_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        return employee

    async def assign_roles(
        self, ctx: RequestContext, org_id: str, user_id: str, roles: list[str]
    ) -> Employee:
        """Replace the custom roles assigned to an employee."""
        await require_admin(self.store, ctx, org_id)
        org = await self.get_organization(org_id)
        employee = await get_employee(self.store, org_id, user_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        role_names = _clean_role_names(roles)
        unknown = [r for r in role_names if r not in org.roles]
        if unknown:
            raise ValidationError(f"Unknown roles: {', '.join(unknown)}")

        employee.roles = role_names
        await self.store.write(paths.employee(org_id, user_id), employee)
        return employee

    async def set_employee_role(
        self, ctx: RequestContext, org_id: str, user_id: str, role: str
    ) -> Employee:
        """Promote or demote an employee's org-level role tag."""
        await require_admin(self.store, ctx, org_id)
        role = (role or "").strip()
        if not role:
            raise ValidationError("Role is required")
        if role == OrgRole.OWNER.value:
            raise ValidationError("Ownership cannot be assigned")

        employee = await get_employee(self.store, org_id, user_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        if employee.is_owner:
            raise ValidationError("Cannot modify the organization owner")

        employee.role = role
        await self.store.write(paths.employee(org_id, user_id), employee)
        if employee.is_admin:
            await self.add_membership(user_id, org_id, admin=True)
        else:
            await self.remove_membership(user_id, org_id, admin_only=True)

        logger.info(f"Employee role changed: org={org_id}, user={user_id}, role={role}")
        return employee

    async def remove_employee(self, ctx: RequestContext, org_id: str, user_id: str) -> None:
        await require_admin(self.store, ctx, org_id)
        employee = await get_employee(self.store, org_id, user_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        if employee.is_owner:
            raise ValidationError("Cannot remove the organization owner")

        await self.store.delete(paths.employee(org_id, user_id))
        await self.remove_membership(user_id, org_id)
        logger.info(f"Employee removed: org={org_id}, user={user_id}, by={ctx.user_id}")
