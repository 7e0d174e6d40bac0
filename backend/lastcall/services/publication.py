"""
Schedule publication and visibility.

Drafts are visible to admins only. Publishing makes a schedule visible to
every employee of the organization and notifies them.
"""
import logging
from typing import Optional

from lastcall.core.context import RequestContext
from lastcall.core.exceptions import NotFoundError
from lastcall.core.permissions import require_admin, require_member
from lastcall.schemas.common import utcnow
from lastcall.schemas.schedule import AssignedShift, WeekSchedule
from lastcall.services.directory import OrganizationDirectory
from lastcall.services.notifications import NotificationDispatcher, notification_dispatcher
from lastcall.store import DocumentStore, paths

logger = logging.getLogger(__name__)


class PublicationWorkflow:
    """Draft -> Published transitions and the member-facing schedule views."""

    def __init__(
        self,
        store: DocumentStore,
        notifier: Optional[NotificationDispatcher] = None,
    ):
        self.store = store
        self.notifier = notifier or notification_dispatcher
        self.directory = OrganizationDirectory(store)

    async def _load(self, org_id: str, schedule_id: str) -> WeekSchedule:
        schedule = await self.store.read(paths.week_schedule(org_id, schedule_id), WeekSchedule)
        if schedule is None:
            raise NotFoundError("Schedule not found")
        return schedule

    async def publish(self, ctx: RequestContext, org_id: str, schedule_id: str) -> WeekSchedule:
        """Publish a schedule. Publishing twice keeps the first publishedAt."""
        await require_admin(self.store, ctx, org_id)
        schedule = await self._load(org_id, schedule_id)
        if schedule.is_published:
            return schedule

        schedule.is_published = True
        schedule.published_at = utcnow()
        await self.store.update(
            paths.week_schedule(org_id, schedule_id),
            {"isPublished": True, "publishedAt": schedule.published_at.isoformat()},
        )
        logger.info(f"Schedule published: org={org_id}, id={schedule_id}, by={ctx.user_id}")

        org = await self.directory.get_organization(org_id)
        employee_ids = [e.user_id for e in await self.directory.list_employee_records(org_id)]
        await self.notifier.schedule_published(
            employee_ids, org.name, schedule.week_start.isoformat(), org_id, schedule_id
        )
        return schedule

    async def delete_schedule(self, ctx: RequestContext, org_id: str, schedule_id: str) -> None:
        """Delete a schedule together with the availability submitted for it."""
        await require_admin(self.store, ctx, org_id)
        if not await self.store.exists(paths.week_schedule(org_id, schedule_id)):
            raise NotFoundError("Schedule not found")
        await self.store.delete_tree(paths.week_schedule(org_id, schedule_id))
        logger.info(f"Schedule deleted: org={org_id}, id={schedule_id}, by={ctx.user_id}")

    async def list_schedules(self, ctx: RequestContext, org_id: str) -> list[WeekSchedule]:
        """Every schedule for admins, published ones for other employees."""
        employee = await require_member(self.store, ctx, org_id)
        schedules = await self.store.list_as(paths.week_schedules(org_id), WeekSchedule)
        if not employee.is_admin:
            schedules = [s for s in schedules if s.is_published]
        return sorted(schedules, key=lambda s: s.week_start)

    async def get_schedule(self, ctx: RequestContext, org_id: str, schedule_id: str) -> WeekSchedule:
        employee = await require_member(self.store, ctx, org_id)
        schedule = await self._load(org_id, schedule_id)
        if not schedule.is_published and not employee.is_admin:
            raise NotFoundError("Schedule not found")
        return schedule

    async def active_schedule(self, ctx: RequestContext, org_id: str) -> WeekSchedule:
        """The published schedule with the latest week start."""
        await require_member(self.store, ctx, org_id)
        published = [
            s for s in await self.store.list_as(paths.week_schedules(org_id), WeekSchedule)
            if s.is_published
        ]
        if not published:
            raise NotFoundError("No published schedule")
        return max(published, key=lambda s: s.week_start)

    async def my_shifts(self, ctx: RequestContext, org_id: str) -> list[AssignedShift]:
        """Shifts assigned to the caller across published schedules."""
        await require_member(self.store, ctx, org_id)
        shifts = []
        for schedule in await self.store.list_as(paths.week_schedules(org_id), WeekSchedule):
            if not schedule.is_published:
                continue
            for day_key, day in schedule.days.items():
                for block in day.roles:
                    for index, shift in enumerate(block.shifts):
                        if shift.employee_id != ctx.user_id:
                            continue
                        shifts.append(AssignedShift(
                            schedule_id=schedule.id,
                            day=day_key,
                            role=block.role,
                            shift_index=index,
                            start_time=shift.start_time,
                            end_time=shift.end_time,
                        ))
        return sorted(shifts, key=lambda s: s.day)
