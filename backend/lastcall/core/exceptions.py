"""
Error taxonomy for the scheduling and onboarding core.

Services raise these; the API layer turns them into JSON responses with the
matching status code (see `lastcall.main`).
"""
from typing import Optional


class LastCallError(Exception):
    """Base class for every typed failure surfaced to callers."""
    status_code: int = 400
    code: str = "error"

    def __init__(self, detail: str, *, code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if code:
            self.code = code


class NotFoundError(LastCallError):
    """Organization, employee, schedule or other record is missing."""
    status_code = 404
    code = "not_found"


class ConflictError(LastCallError):
    """Duplicate record: join request, week schedule, role name."""
    status_code = 409
    code = "conflict"


class AlreadyRequestedError(ConflictError):
    """A pending join request already exists for this user."""
    code = "already_requested"


class ExpiredError(LastCallError):
    """Invite token is past its expiry."""
    status_code = 410
    code = "expired"


class InvalidTokenError(LastCallError):
    """Invite token is absent or does not match any link."""
    status_code = 400
    code = "invalid_token"


class UnauthorizedError(LastCallError):
    """Caller lacks the privilege required for the operation."""
    status_code = 403
    code = "unauthorized"


class ValidationError(LastCallError):
    """A required field is missing or malformed."""
    status_code = 422
    code = "validation_error"
