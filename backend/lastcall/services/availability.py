"""
Availability matching.

Employees record a weekly availability pattern on their profile and may
submit availability for a specific schedule until its deadline; schedule
reviewers use either to see who can take a shift. Matching is by day only:
shift times are accepted for the call signature but not compared against
the entry's time window.
"""
import logging
from datetime import date
from typing import Iterable, Optional

from lastcall.core.context import RequestContext
from lastcall.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from lastcall.core.permissions import get_employee, is_admin_or_owner, require_admin, require_member
from lastcall.schemas.availability import (
    AvailabilityEntry, AvailabilityStatus, DayOfWeek, ScheduleAvailability,
)
from lastcall.schemas.common import utcnow
from lastcall.schemas.employee import Employee, UserProfile
from lastcall.services.directory import OrganizationDirectory
from lastcall.services.role_shifts import ScheduleEditor
from lastcall.store import DocumentStore, paths

logger = logging.getLogger(__name__)


def day_name(day_key: str) -> str:
    """Full English weekday name of a `YYYY-MM-DD` key."""
    try:
        return date.fromisoformat(day_key).strftime("%A")
    except ValueError as e:
        raise ValidationError(f"Invalid day: {day_key!r}") from e


def is_available(
    entries: Iterable[AvailabilityEntry],
    day_of_week: str,
    shift_start: Optional[str] = None,
    shift_end: Optional[str] = None,
) -> bool:
    """
    Whether an availability pattern permits working on `day_of_week`.

    No entry for the day means not available. AVAILABLE and PREFERRED both
    permit; UNAVAILABLE does not.
    """
    for entry in entries:
        if entry.day_of_week.value == day_of_week:
            return entry.status != AvailabilityStatus.UNAVAILABLE
    return False


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def validate_entries(entries: list[AvailabilityEntry]) -> None:
    """Unique days; when both times are given, end after start."""
    seen: set[DayOfWeek] = set()
    for entry in entries:
        if entry.day_of_week in seen:
            raise ValidationError(f"Duplicate availability for {entry.day_of_week.value}")
        seen.add(entry.day_of_week)
        if entry.start_time and entry.end_time:
            if _minutes(entry.end_time) <= _minutes(entry.start_time):
                raise ValidationError(
                    f"End time must be after start time for {entry.day_of_week.value}"
                )


class AvailabilityService:
    """Stores availability on user profiles and matches it against shifts."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.directory = OrganizationDirectory(store)

    async def set_availability(
        self, ctx: RequestContext, entries: list[AvailabilityEntry]
    ) -> UserProfile:
        validate_entries(entries)
        profile = await self.directory.require_profile(ctx.user_id)
        profile.availability = list(entries)
        await self.store.write(paths.user(ctx.user_id), profile)
        logger.info(f"Availability updated: user={ctx.user_id}, days={len(entries)}")
        return profile

    async def get_availability(
        self, ctx: RequestContext, user_id: Optional[str] = None
    ) -> list[AvailabilityEntry]:
        """
        Availability of the caller, or of another user when the caller
        administers an organization that user works for.
        """
        target = user_id or ctx.user_id
        profile = await self.directory.require_profile(target)
        if target == ctx.user_id:
            return profile.availability

        for org_id in profile.employee_org_ids:
            if is_admin_or_owner(await get_employee(self.store, org_id, ctx.user_id)):
                return profile.availability
        raise UnauthorizedError("Not allowed to view this user's availability")

    # ------------------------------------------------------------------
    # Per-schedule submissions
    # ------------------------------------------------------------------

    async def submit_for_schedule(
        self,
        ctx: RequestContext,
        org_id: str,
        schedule_id: str,
        entries: list[AvailabilityEntry],
        today: Optional[date] = None,
    ) -> ScheduleAvailability:
        """
        Submit the caller's availability for one schedule, replacing any
        earlier submission. Accepted up to and including the schedule's
        availability deadline.
        """
        await require_member(self.store, ctx, org_id)
        schedule = await ScheduleEditor(self.store).load(org_id, schedule_id)

        today = today or utcnow().date()
        if today > schedule.availability_deadline:
            logger.info(f"Late availability rejected: schedule={schedule_id}, user={ctx.user_id}")
            raise ValidationError("Availability deadline has passed")
        if not entries:
            raise ValidationError("At least one availability entry is required")
        validate_entries(entries)

        submission = ScheduleAvailability(
            user_id=ctx.user_id, schedule_id=schedule_id, availability=list(entries)
        )
        await self.store.write(paths.schedule_availability(org_id, schedule_id, ctx.user_id), submission)
        logger.info(f"Availability submitted: schedule={schedule_id}, user={ctx.user_id}, days={len(entries)}")
        return submission

    async def get_submission(
        self, ctx: RequestContext, org_id: str, schedule_id: str
    ) -> list[AvailabilityEntry]:
        """The caller's own submission for a schedule; empty when none."""
        await require_member(self.store, ctx, org_id)
        await ScheduleEditor(self.store).load(org_id, schedule_id)
        submission = await self.store.read(
            paths.schedule_availability(org_id, schedule_id, ctx.user_id), ScheduleAvailability
        )
        return submission.availability if submission else []

    async def list_submissions(
        self, ctx: RequestContext, org_id: str, schedule_id: str
    ) -> list[ScheduleAvailability]:
        await require_admin(self.store, ctx, org_id)
        await ScheduleEditor(self.store).load(org_id, schedule_id)
        return await self.store.list_as(
            paths.schedule_availabilities(org_id, schedule_id), ScheduleAvailability
        )

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    async def available_employees(
        self,
        ctx: RequestContext,
        org_id: str,
        schedule_id: str,
        day_key: str,
        shift_start: Optional[str] = None,
        shift_end: Optional[str] = None,
    ) -> list[Employee]:
        """
        Employees whose availability permits working on a schedule day.

        An employee's submission for this schedule wins over the weekly
        pattern on their profile.
        """
        await require_admin(self.store, ctx, org_id)
        schedule = await ScheduleEditor(self.store).load(org_id, schedule_id)
        if day_key not in schedule.days:
            raise NotFoundError(f"Day {day_key} is not part of this schedule")

        submitted = {
            s.user_id: s.availability
            for s in await self.store.list_as(
                paths.schedule_availabilities(org_id, schedule_id), ScheduleAvailability
            )
        }
        weekday = day_name(day_key)
        available = []
        for employee in await self.directory.list_employee_records(org_id):
            entries = submitted.get(employee.user_id)
            if entries is None:
                profile = await self.directory.get_profile(employee.user_id)
                if profile is None:
                    continue
                entries = profile.availability
            if is_available(entries, weekday, shift_start, shift_end):
                available.append(employee)
        return available
