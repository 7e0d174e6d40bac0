"""
Employee, pending employee and user profile schemas.
"""
from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from pydantic import Field

from lastcall.schemas.availability import AvailabilityEntry
from lastcall.schemas.common import DocumentModel, utcnow


class OrgRole(str, Enum):
    """Org-level role tags. Any other string is a custom tag."""
    OWNER = "Owner"
    ADMIN = "admin"
    EMPLOYEE = "Employee"


ADMIN_ROLES = (OrgRole.OWNER.value, OrgRole.ADMIN.value)


class Employee(DocumentModel):
    """Approved member of one organization, keyed by user id."""
    user_id: str
    name: str = ""
    email: Optional[str] = None
    role: str = OrgRole.EMPLOYEE.value
    roles: list[str] = Field(default_factory=list)
    joined_at: datetime = Field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_owner(self) -> bool:
        return self.role == OrgRole.OWNER.value


class PendingEmployee(DocumentModel):
    """A join request awaiting admin approval."""
    user_id: str
    email: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    requested_at: datetime = Field(default_factory=utcnow)
    status: Literal["pending"] = "pending"

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class UserProfile(DocumentModel):
    """Cross-organization user profile stored at Users/{userId}."""
    user_id: str
    email: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    employee_org_ids: list[str] = Field(default_factory=list)
    admin_org_ids: list[str] = Field(default_factory=list)
    availability: list[AvailabilityEntry] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ProfileUpdate(DocumentModel):
    """Create or update the caller's profile."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)


class JoinRequest(DocumentModel):
    """Ask to join an organization with an invite token."""
    token: str


class EmployeeRolesUpdate(DocumentModel):
    """Replace the custom roles assigned to an employee."""
    roles: list[str]


class EmployeeRoleUpdate(DocumentModel):
    """Change an employee's org-level role tag (promotion / demotion)."""
    role: str = Field(..., min_length=1, max_length=50)


class ReconcileResponse(DocumentModel):
    """User ids whose leftover join requests were cleaned up."""
    reconciled: list[str]
