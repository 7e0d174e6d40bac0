"""
Availability schemas.
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import Field

from lastcall.schemas.common import DocumentModel, utcnow

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class DayOfWeek(str, Enum):
    """Full English day names. Abbreviations are not accepted."""
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class AvailabilityStatus(str, Enum):
    """An employee's declared willingness to work a day."""
    AVAILABLE = "AVAILABLE"
    PREFERRED = "PREFERRED"
    UNAVAILABLE = "UNAVAILABLE"


class AvailabilityEntry(DocumentModel):
    """Availability for one day of the week."""
    day_of_week: DayOfWeek
    status: AvailabilityStatus
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)


class AvailabilityUpdate(DocumentModel):
    """Replace the caller's weekly availability."""
    availability: list[AvailabilityEntry]


class ScheduleAvailability(DocumentModel):
    """An employee's availability submitted for one schedule."""
    user_id: str
    schedule_id: str
    availability: list[AvailabilityEntry] = Field(default_factory=list)
    submitted_at: datetime = Field(default_factory=utcnow)
