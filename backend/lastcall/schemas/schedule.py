"""
Week schedule schemas: days, role blocks and shifts.

`WeekSchedule.days` maps `YYYY-MM-DD` keys to DayRecord in calendar order.
Role blocks and shifts are lists; their order is the display order and is
kept as-is through storage.
"""
from datetime import date, datetime
from typing import Optional
from pydantic import Field

from lastcall.schemas.common import DocumentModel, utcnow


class Shift(DocumentModel):
    """A time-bounded, optionally assigned work slot. Times are free text."""
    start_time: str
    end_time: str
    employee_id: Optional[str] = None


class RoleBlock(DocumentModel):
    """Named grouping of shifts within a day, e.g. "Bartender"."""
    role: str
    shifts: list[Shift] = Field(default_factory=list)


class DayRecord(DocumentModel):
    roles: list[RoleBlock] = Field(default_factory=list)


class WeekSchedule(DocumentModel):
    """Per-week container of day/role/shift data for one organization."""
    id: str
    org_id: str
    week_start: date
    num_days: int
    availability_deadline: date
    days: dict[str, DayRecord] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=utcnow)
    is_published: bool = False
    published_at: Optional[datetime] = None


class ScheduleCreate(DocumentModel):
    """Generate the skeleton of a week's schedule."""
    start_date: date
    num_days: int
    overwrite: bool = False


class ScheduleUpdate(DocumentModel):
    """Draft schedule metadata."""
    availability_deadline: date


class RoleBlockCreate(DocumentModel):
    role: str = Field(..., max_length=100)


class ShiftCreate(DocumentModel):
    start_time: str = Field(..., max_length=20)
    end_time: str = Field(..., max_length=20)


class ShiftAssignment(DocumentModel):
    employee_id: str


class AssignedShift(DocumentModel):
    """A shift assigned to the caller in a published schedule."""
    schedule_id: str
    day: str
    role: str
    shift_index: int
    start_time: str
    end_time: str
