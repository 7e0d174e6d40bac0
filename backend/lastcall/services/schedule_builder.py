"""
Week schedule generation.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Union

from lastcall.core.config import settings
from lastcall.core.context import RequestContext
from lastcall.core.exceptions import ConflictError, ValidationError
from lastcall.core.permissions import require_admin
from lastcall.schemas.schedule import DayRecord, WeekSchedule
from lastcall.store import DocumentStore, paths

logger = logging.getLogger(__name__)


def parse_date(value: Union[date, datetime, str]) -> date:
    # datetime is a date subclass; keys must stay YYYY-MM-DD
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid date: {value!r}") from e


def day_keys(start_date: date, num_days: int) -> list[str]:
    """`YYYY-MM-DD` keys for `num_days` consecutive days from `start_date`."""
    return [(start_date + timedelta(days=i)).isoformat() for i in range(num_days)]


def availability_deadline(start_date: date) -> date:
    return start_date - timedelta(days=settings.AVAILABILITY_DEADLINE_OFFSET_DAYS)


class ScheduleBuilder:
    """Produces empty week-schedule skeletons."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def generate_week(
        self,
        ctx: RequestContext,
        org_id: str,
        start_date: Union[date, datetime, str],
        num_days: int,
        overwrite: bool = False,
    ) -> WeekSchedule:
        """
        Create the schedule for the week starting at `start_date`.

        There is one schedule per organization per start date. Unless
        `overwrite` is set an existing schedule is left untouched and
        ConflictError is raised. A published schedule is never replaced.
        """
        await require_admin(self.store, ctx, org_id)

        start = parse_date(start_date)
        if num_days < 1 or num_days > settings.MAX_SCHEDULE_DAYS:
            raise ValidationError(
                f"Number of days must be between 1 and {settings.MAX_SCHEDULE_DAYS}"
            )

        schedule_id = paths.schedule_id(org_id, start)
        schedule = WeekSchedule(
            id=schedule_id,
            org_id=org_id,
            week_start=start,
            num_days=num_days,
            availability_deadline=availability_deadline(start),
            days={key: DayRecord() for key in day_keys(start, num_days)},
        )

        path = paths.week_schedule(org_id, schedule_id)
        if overwrite:
            existing = await self.store.read(path, WeekSchedule)
            if existing is not None and existing.is_published:
                logger.warning(f"Refusing to replace published schedule: org={org_id}, id={schedule_id}")
                raise ConflictError("Cannot replace a published schedule")
        try:
            await self.store.write(path, schedule, overwrite=overwrite)
        except ConflictError:
            logger.warning(f"Schedule already exists: org={org_id}, id={schedule_id}")
            raise ConflictError(f"A schedule for the week of {start.isoformat()} already exists")

        logger.info(f"Schedule generated: org={org_id}, id={schedule_id}, days={num_days}")
        return schedule
