"""
Tests for role block and shift operations.
"""
from datetime import date

import pytest
import pytest_asyncio

from lastcall.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from lastcall.schemas.schedule import DayRecord, WeekSchedule
from lastcall.services import role_shifts
from lastcall.services.publication import PublicationWorkflow
from lastcall.services.role_shifts import ScheduleEditor
from lastcall.services.schedule_builder import ScheduleBuilder
from lastcall.store import paths

DAY = "2025-06-02"


@pytest.fixture
def days():
    return {DAY: DayRecord(), "2025-06-03": DayRecord()}


class TestPureOperations:
    """The module-level functions never mutate their input."""

    def test_add_role_returns_new_mapping(self, days):
        result = role_shifts.add_role(days, DAY, "Bartender")
        assert [b.role for b in result[DAY].roles] == ["Bartender"]
        assert days[DAY].roles == []

    def test_add_duplicate_role_conflicts(self, days):
        days = role_shifts.add_role(days, DAY, "Bartender")
        with pytest.raises(ConflictError):
            role_shifts.add_role(days, DAY, "Bartender")

    def test_same_role_on_different_days(self, days):
        days = role_shifts.add_role(days, DAY, "Bartender")
        days = role_shifts.add_role(days, "2025-06-03", "Bartender")
        assert len(days["2025-06-03"].roles) == 1

    def test_blank_role_rejected(self, days):
        with pytest.raises(ValidationError):
            role_shifts.add_role(days, DAY, "   ")

    def test_unknown_day(self, days):
        with pytest.raises(NotFoundError):
            role_shifts.add_role(days, "2025-07-01", "Bartender")

    def test_remove_role(self, days):
        days = role_shifts.add_role(days, DAY, "Bartender")
        days = role_shifts.add_role(days, DAY, "Server")
        result = role_shifts.remove_role(days, DAY, "Bartender")
        assert [b.role for b in result[DAY].roles] == ["Server"]
        assert len(days[DAY].roles) == 2
        with pytest.raises(NotFoundError):
            role_shifts.remove_role(result, DAY, "Bartender")

    def test_shift_order_is_insertion_order(self, days):
        days = role_shifts.add_role(days, DAY, "Bartender")
        days = role_shifts.add_shift(days, DAY, "Bartender", "18:00", "02:00")
        days = role_shifts.add_shift(days, DAY, "Bartender", "12:00", "18:00")
        shifts = days[DAY].roles[0].shifts
        assert [s.start_time for s in shifts] == ["18:00", "12:00"]
        assert all(s.employee_id is None for s in shifts)

    def test_add_shift_requires_times(self, days):
        days = role_shifts.add_role(days, DAY, "Bartender")
        with pytest.raises(ValidationError):
            role_shifts.add_shift(days, DAY, "Bartender", "", "02:00")

    def test_add_shift_to_missing_role(self, days):
        with pytest.raises(NotFoundError):
            role_shifts.add_shift(days, DAY, "Bartender", "18:00", "02:00")

    def test_assign_and_unassign(self, days):
        days = role_shifts.add_role(days, DAY, "Bartender")
        days = role_shifts.add_shift(days, DAY, "Bartender", "18:00", "02:00")
        assigned = role_shifts.assign_shift(days, DAY, "Bartender", 0, "worker-1")
        assert assigned[DAY].roles[0].shifts[0].employee_id == "worker-1"
        assert days[DAY].roles[0].shifts[0].employee_id is None

        cleared = role_shifts.unassign(assigned, DAY, "Bartender", 0)
        assert cleared[DAY].roles[0].shifts[0].employee_id is None

    def test_shift_index_out_of_range(self, days):
        days = role_shifts.add_role(days, DAY, "Bartender")
        days = role_shifts.add_shift(days, DAY, "Bartender", "18:00", "02:00")
        with pytest.raises(NotFoundError):
            role_shifts.remove_shift(days, DAY, "Bartender", 1)
        with pytest.raises(NotFoundError):
            role_shifts.assign_shift(days, DAY, "Bartender", -1, "worker-1")

    def test_remove_shift_keeps_the_rest_in_order(self, days):
        days = role_shifts.add_role(days, DAY, "Bartender")
        for start in ("10:00", "14:00", "18:00"):
            days = role_shifts.add_shift(days, DAY, "Bartender", start, "23:00")
        result = role_shifts.remove_shift(days, DAY, "Bartender", 1)
        assert [s.start_time for s in result[DAY].roles[0].shifts] == ["10:00", "18:00"]


class TestScheduleEditor:
    """Read-modify-write of stored schedules."""

    @pytest.mark.asyncio
    async def test_order_survives_storage(self, store, org, owner_ctx):
        schedule = await ScheduleBuilder(store).generate_week(owner_ctx, org.id, DAY, 7)
        editor = ScheduleEditor(store)
        await editor.add_role(owner_ctx, org.id, schedule.id, DAY, "Server")
        await editor.add_role(owner_ctx, org.id, schedule.id, DAY, "Bartender")
        await editor.add_shift(owner_ctx, org.id, schedule.id, DAY, "Bartender", "20:00", "02:00")
        await editor.add_shift(owner_ctx, org.id, schedule.id, DAY, "Bartender", "16:00", "20:00")

        stored = await editor.load(org.id, schedule.id)
        assert isinstance(stored, WeekSchedule)
        assert [b.role for b in stored.days[DAY].roles] == ["Server", "Bartender"]
        assert [s.start_time for s in stored.days[DAY].roles[1].shifts] == ["20:00", "16:00"]
        assert list(stored.days) == [
            "2025-06-02", "2025-06-03", "2025-06-04", "2025-06-05",
            "2025-06-06", "2025-06-07", "2025-06-08",
        ]

    @pytest.mark.asyncio
    async def test_assign_requires_existing_employee(self, store, org, owner_ctx, worker):
        schedule = await ScheduleBuilder(store).generate_week(owner_ctx, org.id, DAY, 1)
        editor = ScheduleEditor(store)
        await editor.add_role(owner_ctx, org.id, schedule.id, DAY, "Bartender")
        await editor.add_shift(owner_ctx, org.id, schedule.id, DAY, "Bartender", "18:00", "02:00")

        with pytest.raises(NotFoundError):
            await editor.assign_shift(owner_ctx, org.id, schedule.id, DAY, "Bartender", 0, "ghost")

        updated = await editor.assign_shift(
            owner_ctx, org.id, schedule.id, DAY, "Bartender", 0, worker.user_id
        )
        assert updated.days[DAY].roles[0].shifts[0].employee_id == worker.user_id

    @pytest.mark.asyncio
    async def test_non_admin_cannot_edit(self, store, org, owner_ctx, worker_ctx, worker):
        schedule = await ScheduleBuilder(store).generate_week(owner_ctx, org.id, DAY, 1)
        with pytest.raises(UnauthorizedError):
            await ScheduleEditor(store).add_role(worker_ctx, org.id, schedule.id, DAY, "Bartender")

    @pytest.mark.asyncio
    async def test_missing_schedule(self, store, org, owner_ctx):
        with pytest.raises(NotFoundError):
            await ScheduleEditor(store).add_role(owner_ctx, org.id, "nope", DAY, "Bartender")


class TestPublishedSchedulesAreLocked:
    """Edits are rejected once a schedule is published."""

    @pytest_asyncio.fixture
    async def published(self, store, org, owner_ctx, worker):
        schedule = await ScheduleBuilder(store).generate_week(owner_ctx, org.id, DAY, 2)
        editor = ScheduleEditor(store)
        await editor.add_role(owner_ctx, org.id, schedule.id, DAY, "Bartender")
        await editor.add_shift(owner_ctx, org.id, schedule.id, DAY, "Bartender", "18:00", "02:00")
        return await PublicationWorkflow(store).publish(owner_ctx, org.id, schedule.id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,args", [
        ("add_role", (DAY, "Server")),
        ("remove_role", (DAY, "Bartender")),
        ("add_shift", (DAY, "Bartender", "12:00", "18:00")),
        ("remove_shift", (DAY, "Bartender", 0)),
        ("assign_shift", (DAY, "Bartender", 0, "worker-1")),
        ("assign_shift", (DAY, "Bartender", 0, None)),
        ("set_availability_deadline", (date(2025, 5, 30),)),
    ])
    async def test_edit_rejected(self, store, org, owner_ctx, published, method, args):
        editor = ScheduleEditor(store)
        with pytest.raises(ConflictError):
            await getattr(editor, method)(owner_ctx, org.id, published.id, *args)

        stored = await editor.load(org.id, published.id)
        assert stored.is_published
        assert [b.role for b in stored.days[DAY].roles] == ["Bartender"]
        assert stored.days[DAY].roles[0].shifts[0].employee_id is None
        assert stored.availability_deadline == date(2025, 5, 31)


class TestAvailabilityDeadline:

    @pytest.mark.asyncio
    async def test_move_deadline_on_draft(self, store, org, owner_ctx):
        schedule = await ScheduleBuilder(store).generate_week(owner_ctx, org.id, DAY, 7)
        updated = await ScheduleEditor(store).set_availability_deadline(
            owner_ctx, org.id, schedule.id, date(2025, 5, 28)
        )
        assert updated.availability_deadline == date(2025, 5, 28)
        raw = await store.get(paths.week_schedule(org.id, schedule.id))
        assert raw["availabilityDeadline"] == "2025-05-28"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("deadline", [date(2025, 6, 2), date(2025, 6, 3)])
    async def test_deadline_must_precede_week_start(self, store, org, owner_ctx, deadline):
        schedule = await ScheduleBuilder(store).generate_week(owner_ctx, org.id, DAY, 7)
        with pytest.raises(ValidationError):
            await ScheduleEditor(store).set_availability_deadline(owner_ctx, org.id, schedule.id, deadline)

    @pytest.mark.asyncio
    async def test_employee_cannot_move_deadline(self, store, org, owner_ctx, worker_ctx, worker):
        schedule = await ScheduleBuilder(store).generate_week(owner_ctx, org.id, DAY, 7)
        with pytest.raises(UnauthorizedError):
            await ScheduleEditor(store).set_availability_deadline(
                worker_ctx, org.id, schedule.id, date(2025, 5, 28)
            )
