"""
Document paths.

The persisted layout:

    Organizations/{orgId}
    Organizations/{orgId}/Employees/{userId}
    Organizations/{orgId}/PendingEmployees/{userId}
    Organizations/{orgId}/weekSchedules/{orgId}_{weekStart}
    Organizations/{orgId}/weekSchedules/{scheduleId}/availability/{userId}
    Users/{userId}
"""
from datetime import date

ORGANIZATIONS = "Organizations"
EMPLOYEES = "Employees"
PENDING_EMPLOYEES = "PendingEmployees"
WEEK_SCHEDULES = "weekSchedules"
AVAILABILITY = "availability"
USERS = "Users"


def join(*parts: str) -> str:
    for part in parts:
        if not part or "/" in part:
            raise ValueError(f"Invalid path segment: {part!r}")
    return "/".join(parts)


def parent(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


def organization(org_id: str) -> str:
    return join(ORGANIZATIONS, org_id)


def employees(org_id: str) -> str:
    return join(ORGANIZATIONS, org_id, EMPLOYEES)


def employee(org_id: str, user_id: str) -> str:
    return join(ORGANIZATIONS, org_id, EMPLOYEES, user_id)


def pending_employees(org_id: str) -> str:
    return join(ORGANIZATIONS, org_id, PENDING_EMPLOYEES)


def pending_employee(org_id: str, user_id: str) -> str:
    return join(ORGANIZATIONS, org_id, PENDING_EMPLOYEES, user_id)


def week_schedules(org_id: str) -> str:
    return join(ORGANIZATIONS, org_id, WEEK_SCHEDULES)


def schedule_id(org_id: str, week_start: date) -> str:
    """Deterministic schedule key: one document per organization per week start."""
    return f"{org_id}_{week_start.isoformat()}"


def week_schedule(org_id: str, schedule_key: str) -> str:
    return join(ORGANIZATIONS, org_id, WEEK_SCHEDULES, schedule_key)


def schedule_availabilities(org_id: str, schedule_key: str) -> str:
    return join(ORGANIZATIONS, org_id, WEEK_SCHEDULES, schedule_key, AVAILABILITY)


def schedule_availability(org_id: str, schedule_key: str, user_id: str) -> str:
    return join(ORGANIZATIONS, org_id, WEEK_SCHEDULES, schedule_key, AVAILABILITY, user_id)


def user(user_id: str) -> str:
    return join(USERS, user_id)
