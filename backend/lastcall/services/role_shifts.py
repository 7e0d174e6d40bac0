"""
Role and shift operations on a schedule's `days` mapping.

The module-level functions are pure: each returns a new mapping and leaves
its input untouched. `ScheduleEditor` applies them to stored schedules.
"""
import logging
from datetime import date
from typing import Optional

from lastcall.core.context import RequestContext
from lastcall.core.exceptions import ConflictError, NotFoundError, ValidationError
from lastcall.core.permissions import get_employee, require_admin
from lastcall.schemas.schedule import DayRecord, RoleBlock, Shift, WeekSchedule
from lastcall.store import DocumentStore, paths

logger = logging.getLogger(__name__)

Days = dict[str, DayRecord]


def _copy(days: Days) -> Days:
    return {key: day.model_copy(deep=True) for key, day in days.items()}


def _day(days: Days, day_key: str) -> DayRecord:
    day = days.get(day_key)
    if day is None:
        raise NotFoundError(f"Day {day_key} is not part of this schedule")
    return day


def _block(day: DayRecord, role: str) -> RoleBlock:
    for block in day.roles:
        if block.role == role:
            return block
    raise NotFoundError(f"Role {role} not found on this day")


def _shift(block: RoleBlock, index: int) -> Shift:
    if index < 0 or index >= len(block.shifts):
        raise NotFoundError(f"Shift {index} not found for role {block.role}")
    return block.shifts[index]


def add_role(days: Days, day_key: str, role: str) -> Days:
    role = (role or "").strip()
    if not role:
        raise ValidationError("Role name is required")
    result = _copy(days)
    day = _day(result, day_key)
    if any(block.role == role for block in day.roles):
        raise ConflictError(f"Role {role} already exists on {day_key}")
    day.roles.append(RoleBlock(role=role))
    return result


def remove_role(days: Days, day_key: str, role: str) -> Days:
    result = _copy(days)
    day = _day(result, day_key)
    day.roles.remove(_block(day, role))
    return result


def add_shift(days: Days, day_key: str, role: str, start_time: str, end_time: str) -> Days:
    """Append a shift to a role block; shift order is insertion order."""
    start_time = (start_time or "").strip()
    end_time = (end_time or "").strip()
    if not start_time or not end_time:
        raise ValidationError("Shift start and end times are required")
    result = _copy(days)
    block = _block(_day(result, day_key), role)
    block.shifts.append(Shift(start_time=start_time, end_time=end_time))
    return result


def remove_shift(days: Days, day_key: str, role: str, index: int) -> Days:
    result = _copy(days)
    block = _block(_day(result, day_key), role)
    _shift(block, index)
    del block.shifts[index]
    return result


def assign_shift(days: Days, day_key: str, role: str, index: int, employee_id: str) -> Days:
    if not employee_id:
        raise ValidationError("Employee id is required")
    result = _copy(days)
    _shift(_block(_day(result, day_key), role), index).employee_id = employee_id
    return result


def unassign(days: Days, day_key: str, role: str, index: int) -> Days:
    result = _copy(days)
    _shift(_block(_day(result, day_key), role), index).employee_id = None
    return result


class ScheduleEditor:
    """
    Read-modify-write of a stored schedule. Admins only.

    Only drafts can be edited; every edit of a published schedule raises
    ConflictError.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def load(self, org_id: str, schedule_id: str) -> WeekSchedule:
        schedule = await self.store.read(paths.week_schedule(org_id, schedule_id), WeekSchedule)
        if schedule is None:
            raise NotFoundError("Schedule not found")
        return schedule

    async def load_draft(self, org_id: str, schedule_id: str) -> WeekSchedule:
        schedule = await self.load(org_id, schedule_id)
        if schedule.is_published:
            logger.warning(f"Edit rejected on published schedule: org={org_id}, id={schedule_id}")
            raise ConflictError("Cannot modify a published schedule")
        return schedule

    async def _save(self, org_id: str, schedule: WeekSchedule, days: Days) -> WeekSchedule:
        schedule.days = days
        await self.store.write(paths.week_schedule(org_id, schedule.id), schedule)
        return schedule

    async def add_role(
        self, ctx: RequestContext, org_id: str, schedule_id: str, day_key: str, role: str
    ) -> WeekSchedule:
        await require_admin(self.store, ctx, org_id)
        schedule = await self.load_draft(org_id, schedule_id)
        return await self._save(org_id, schedule, add_role(schedule.days, day_key, role))

    async def remove_role(
        self, ctx: RequestContext, org_id: str, schedule_id: str, day_key: str, role: str
    ) -> WeekSchedule:
        await require_admin(self.store, ctx, org_id)
        schedule = await self.load_draft(org_id, schedule_id)
        return await self._save(org_id, schedule, remove_role(schedule.days, day_key, role))

    async def add_shift(
        self,
        ctx: RequestContext,
        org_id: str,
        schedule_id: str,
        day_key: str,
        role: str,
        start_time: str,
        end_time: str,
    ) -> WeekSchedule:
        await require_admin(self.store, ctx, org_id)
        schedule = await self.load_draft(org_id, schedule_id)
        days = add_shift(schedule.days, day_key, role, start_time, end_time)
        return await self._save(org_id, schedule, days)

    async def remove_shift(
        self, ctx: RequestContext, org_id: str, schedule_id: str, day_key: str, role: str, index: int
    ) -> WeekSchedule:
        await require_admin(self.store, ctx, org_id)
        schedule = await self.load_draft(org_id, schedule_id)
        return await self._save(org_id, schedule, remove_shift(schedule.days, day_key, role, index))

    async def assign_shift(
        self,
        ctx: RequestContext,
        org_id: str,
        schedule_id: str,
        day_key: str,
        role: str,
        index: int,
        employee_id: Optional[str],
    ) -> WeekSchedule:
        """Assign a shift to an employee of the organization, or clear it with None."""
        await require_admin(self.store, ctx, org_id)
        schedule = await self.load_draft(org_id, schedule_id)
        if employee_id is None:
            days = unassign(schedule.days, day_key, role, index)
        else:
            if await get_employee(self.store, org_id, employee_id) is None:
                raise NotFoundError("Employee not found")
            days = assign_shift(schedule.days, day_key, role, index, employee_id)
        logger.info(
            f"Shift assignment: schedule={schedule_id}, day={day_key}, role={role}, "
            f"index={index}, employee={employee_id}"
        )
        return await self._save(org_id, schedule, days)

    async def set_availability_deadline(
        self, ctx: RequestContext, org_id: str, schedule_id: str, deadline: date
    ) -> WeekSchedule:
        """Move a draft's availability deadline. It must stay before the week start."""
        await require_admin(self.store, ctx, org_id)
        schedule = await self.load_draft(org_id, schedule_id)
        if deadline >= schedule.week_start:
            raise ValidationError("Availability deadline must be before the week start date")
        schedule.availability_deadline = deadline
        await self.store.update(
            paths.week_schedule(org_id, schedule_id),
            {"availabilityDeadline": deadline.isoformat()},
        )
        logger.info(f"Availability deadline set: schedule={schedule_id}, deadline={deadline.isoformat()}")
        return schedule
