"""
Week schedule endpoints: generation, publication, availability submissions
and the day/role/shift editing operations.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from lastcall.core.context import RequestContext
from lastcall.core.deps import get_current_user, get_store
from lastcall.schemas.availability import AvailabilityEntry, AvailabilityUpdate, ScheduleAvailability
from lastcall.schemas.employee import Employee
from lastcall.schemas.schedule import (
    AssignedShift, RoleBlockCreate, ScheduleCreate, ScheduleUpdate, ShiftAssignment, ShiftCreate,
    WeekSchedule,
)
from lastcall.services.availability import AvailabilityService
from lastcall.services.notifications import NotificationDispatcher, get_notifier
from lastcall.services.publication import PublicationWorkflow
from lastcall.services.role_shifts import ScheduleEditor
from lastcall.services.schedule_builder import ScheduleBuilder
from lastcall.store import DocumentStore

router = APIRouter()


def get_publication(
    store: DocumentStore = Depends(get_store),
    notifier: NotificationDispatcher = Depends(get_notifier)
) -> PublicationWorkflow:
    return PublicationWorkflow(store, notifier)


@router.post("", response_model=WeekSchedule, status_code=status.HTTP_201_CREATED)
async def generate_schedule(
    org_id: str,
    data: ScheduleCreate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Generate an empty schedule for the week starting at `startDate`.
    Requires admin role. Returns 409 if one exists and `overwrite` is not set.
    """
    return await ScheduleBuilder(store).generate_week(
        ctx, org_id, data.start_date, data.num_days, overwrite=data.overwrite
    )


@router.get("", response_model=list[WeekSchedule])
async def list_schedules(
    org_id: str,
    publication: PublicationWorkflow = Depends(get_publication),
    ctx: RequestContext = Depends(get_current_user)
):
    """List schedules. Non-admins only see published ones."""
    return await publication.list_schedules(ctx, org_id)


@router.get("/my-shifts", response_model=list[AssignedShift])
async def my_shifts(
    org_id: str,
    publication: PublicationWorkflow = Depends(get_publication),
    ctx: RequestContext = Depends(get_current_user)
):
    """Shifts assigned to the caller in published schedules."""
    return await publication.my_shifts(ctx, org_id)


@router.get("/active", response_model=WeekSchedule)
async def active_schedule(
    org_id: str,
    publication: PublicationWorkflow = Depends(get_publication),
    ctx: RequestContext = Depends(get_current_user)
):
    """The most recent published schedule."""
    return await publication.active_schedule(ctx, org_id)


@router.get("/{schedule_id}", response_model=WeekSchedule)
async def get_schedule(
    org_id: str,
    schedule_id: str,
    publication: PublicationWorkflow = Depends(get_publication),
    ctx: RequestContext = Depends(get_current_user)
):
    return await publication.get_schedule(ctx, org_id, schedule_id)


@router.patch("/{schedule_id}", response_model=WeekSchedule)
async def update_schedule(
    org_id: str,
    schedule_id: str,
    data: ScheduleUpdate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Move a draft's availability deadline.
    Requires admin role. Returns 409 for a published schedule.
    """
    return await ScheduleEditor(store).set_availability_deadline(
        ctx, org_id, schedule_id, data.availability_deadline
    )


@router.post("/{schedule_id}/publish", response_model=WeekSchedule)
async def publish_schedule(
    org_id: str,
    schedule_id: str,
    publication: PublicationWorkflow = Depends(get_publication),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Publish a schedule to all employees.
    Requires admin role.
    """
    return await publication.publish(ctx, org_id, schedule_id)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    org_id: str,
    schedule_id: str,
    publication: PublicationWorkflow = Depends(get_publication),
    ctx: RequestContext = Depends(get_current_user)
):
    await publication.delete_schedule(ctx, org_id, schedule_id)
    return None


# ============================================================================
# DAY / ROLE / SHIFT EDITING
# ============================================================================

@router.post("/{schedule_id}/days/{day}/roles", response_model=WeekSchedule)
async def add_day_role(
    org_id: str,
    schedule_id: str,
    day: str,
    data: RoleBlockCreate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    return await ScheduleEditor(store).add_role(ctx, org_id, schedule_id, day, data.role)


@router.delete("/{schedule_id}/days/{day}/roles/{role}", response_model=WeekSchedule)
async def remove_day_role(
    org_id: str,
    schedule_id: str,
    day: str,
    role: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Remove a role block and all of its shifts from a day."""
    return await ScheduleEditor(store).remove_role(ctx, org_id, schedule_id, day, role)


@router.post("/{schedule_id}/days/{day}/roles/{role}/shifts", response_model=WeekSchedule)
async def add_shift(
    org_id: str,
    schedule_id: str,
    day: str,
    role: str,
    data: ShiftCreate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    return await ScheduleEditor(store).add_shift(
        ctx, org_id, schedule_id, day, role, data.start_time, data.end_time
    )


@router.delete("/{schedule_id}/days/{day}/roles/{role}/shifts/{index}", response_model=WeekSchedule)
async def remove_shift(
    org_id: str,
    schedule_id: str,
    day: str,
    role: str,
    index: int,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    return await ScheduleEditor(store).remove_shift(ctx, org_id, schedule_id, day, role, index)


@router.put("/{schedule_id}/days/{day}/roles/{role}/shifts/{index}/assignment", response_model=WeekSchedule)
async def assign_shift(
    org_id: str,
    schedule_id: str,
    day: str,
    role: str,
    index: int,
    data: ShiftAssignment,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Assign a shift to an employee of the organization."""
    return await ScheduleEditor(store).assign_shift(
        ctx, org_id, schedule_id, day, role, index, data.employee_id
    )


@router.delete("/{schedule_id}/days/{day}/roles/{role}/shifts/{index}/assignment", response_model=WeekSchedule)
async def unassign_shift(
    org_id: str,
    schedule_id: str,
    day: str,
    role: str,
    index: int,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    return await ScheduleEditor(store).assign_shift(
        ctx, org_id, schedule_id, day, role, index, None
    )


@router.get("/{schedule_id}/days/{day}/available-employees", response_model=list[Employee])
async def available_employees(
    org_id: str,
    schedule_id: str,
    day: str,
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Employees whose weekly availability permits working this day.
    Requires admin role.
    """
    return await AvailabilityService(store).available_employees(
        ctx, org_id, schedule_id, day, start, end
    )


# ============================================================================
# AVAILABILITY SUBMISSIONS
# ============================================================================

@router.get("/{schedule_id}/availability", response_model=list[ScheduleAvailability])
async def list_schedule_availability(
    org_id: str,
    schedule_id: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    Every employee's submission for this schedule.
    Requires admin role.
    """
    return await AvailabilityService(store).list_submissions(ctx, org_id, schedule_id)


@router.get("/{schedule_id}/availability/me", response_model=list[AvailabilityEntry])
async def get_my_schedule_availability(
    org_id: str,
    schedule_id: str,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    return await AvailabilityService(store).get_submission(ctx, org_id, schedule_id)


@router.put("/{schedule_id}/availability/me", response_model=ScheduleAvailability)
async def submit_my_schedule_availability(
    org_id: str,
    schedule_id: str,
    data: AvailabilityUpdate,
    store: DocumentStore = Depends(get_store),
    ctx: RequestContext = Depends(get_current_user)
):
    """Submit the caller's availability for this schedule. Closed after the deadline."""
    return await AvailabilityService(store).submit_for_schedule(
        ctx, org_id, schedule_id, data.availability
    )
