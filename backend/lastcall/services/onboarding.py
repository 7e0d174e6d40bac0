"""
Onboarding workflow: join requests and their approval.

    NotRequested --request_join--> Pending --approve--> Employee
                                           --deny-----> NotRequested

Approval touches three documents (employee record, user profile, pending
record) without a transaction. Every step checks existence first and the
pending record is deleted last, so re-running approve after a partial
failure finishes the job instead of duplicating it.
"""
import logging
from typing import Optional

from lastcall.core.context import RequestContext
from lastcall.core.exceptions import AlreadyRequestedError, ConflictError, NotFoundError
from lastcall.core.permissions import get_employee, require_admin
from lastcall.schemas.employee import Employee, OrgRole, PendingEmployee
from lastcall.services.directory import OrganizationDirectory
from lastcall.services.invites import InviteTokenService
from lastcall.services.notifications import NotificationDispatcher, notification_dispatcher
from lastcall.store import DocumentStore, paths

logger = logging.getLogger(__name__)


class OnboardingWorkflow:
    """Moves users from invite link to employee record."""

    def __init__(
        self,
        store: DocumentStore,
        notifier: Optional[NotificationDispatcher] = None,
    ):
        self.store = store
        self.notifier = notifier or notification_dispatcher
        self.directory = OrganizationDirectory(store)
        self.invites = InviteTokenService(store)

    async def request_join(self, ctx: RequestContext, org_id: str, token: str) -> PendingEmployee:
        """
        Ask to join an organization using an invite token.

        Raises:
            NotFoundError: organization or caller's profile missing
            InvalidTokenError / ExpiredError: invite not usable
            ConflictError: caller already an employee
            AlreadyRequestedError: a request is already pending
        """
        org = await self.invites.require_valid(org_id, token)
        profile = await self.directory.require_profile(ctx.user_id)

        if await get_employee(self.store, org_id, ctx.user_id) is not None:
            raise ConflictError("You are already a member of this organization")

        path = paths.pending_employee(org_id, ctx.user_id)
        if await self.store.exists(path):
            raise AlreadyRequestedError("You have already requested to join this organization")

        pending = PendingEmployee(
            user_id=ctx.user_id,
            email=ctx.email or profile.email,
            first_name=profile.first_name,
            last_name=profile.last_name,
        )
        try:
            await self.store.create(path, pending)
        except ConflictError as e:
            raise AlreadyRequestedError("You have already requested to join this organization") from e

        logger.info(f"Join requested: org={org_id}, user={ctx.user_id}")
        await self.notifier.join_requested(
            await self.directory.admin_ids(org_id), org.name, pending.display_name, org_id
        )
        return pending

    async def list_pending(self, ctx: RequestContext, org_id: str) -> list[PendingEmployee]:
        await require_admin(self.store, ctx, org_id)
        pending = await self.store.list_as(paths.pending_employees(org_id), PendingEmployee)
        return sorted(pending, key=lambda p: p.requested_at)

    async def approve(self, ctx: RequestContext, org_id: str, user_id: str) -> Employee:
        """
        Approve a pending join request. Safe to repeat.

        Steps, in order:
            1. create the Employee record if absent
            2. add the org to the user's employeeOrgIds
            3. delete the PendingEmployee record
        """
        await require_admin(self.store, ctx, org_id)
        org = await self.directory.get_organization(org_id)

        pending_path = paths.pending_employee(org_id, user_id)
        pending = await self.store.read(pending_path, PendingEmployee)
        employee = await get_employee(self.store, org_id, user_id)

        if pending is None and employee is None:
            raise NotFoundError("Pending employee not found")
        if pending is None:
            return employee

        if employee is None:
            employee = Employee(
                user_id=user_id,
                name=pending.display_name,
                email=pending.email,
                role=OrgRole.EMPLOYEE.value,
            )
            await self.store.create(paths.employee(org_id, user_id), employee)

        await self.directory.add_membership(user_id, org_id)
        await self.store.delete(pending_path)

        logger.info(f"Join approved: org={org_id}, user={user_id}, by={ctx.user_id}")
        await self.notifier.join_approved(user_id, org.name, org_id)
        return employee

    async def deny(self, ctx: RequestContext, org_id: str, user_id: str) -> bool:
        """Discard a join request. Returns False if there was none."""
        await require_admin(self.store, ctx, org_id)
        deleted = await self.store.delete(paths.pending_employee(org_id, user_id))
        if deleted:
            logger.info(f"Join denied: org={org_id}, user={user_id}, by={ctx.user_id}")
        return deleted

    async def reconcile(self, ctx: RequestContext, org_id: str) -> list[str]:
        """
        Finish approvals that stopped after the employee record was written.

        Returns the user ids whose pending records were cleaned up.
        """
        await require_admin(self.store, ctx, org_id)
        reconciled = []
        for pending in await self.store.list_as(paths.pending_employees(org_id), PendingEmployee):
            if await get_employee(self.store, org_id, pending.user_id) is None:
                continue
            await self.directory.add_membership(pending.user_id, org_id)
            await self.store.delete(paths.pending_employee(org_id, pending.user_id))
            reconciled.append(pending.user_id)

        if reconciled:
            logger.warning(f"Reconciled orphaned join requests: org={org_id}, users={reconciled}")
        return reconciled
