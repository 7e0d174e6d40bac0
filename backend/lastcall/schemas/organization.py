"""
Organization and invite link schemas.
"""
from datetime import datetime
from typing import Optional
from pydantic import Field

from lastcall.schemas.common import DocumentModel, utcnow


class InviteLink(DocumentModel):
    """Token-bearing invite with an expiry. Multi-use until it expires."""
    token: str
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime
    created_by: Optional[str] = None

    def is_active(self, now: datetime) -> bool:
        return now < self.expires_at


class Organization(DocumentModel):
    """Tenant scope owning employees, roles and schedules."""
    id: str
    name: str
    description: Optional[str] = None
    roles: list[str] = Field(default_factory=list)
    invite_links: list[InviteLink] = Field(default_factory=list)
    owner_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class OrganizationCreate(DocumentModel):
    """Create an organization; the caller becomes its owner."""
    name: str = Field(..., max_length=200)
    description: Optional[str] = None
    roles: Optional[list[str]] = None


class OrganizationUpdate(DocumentModel):
    """Change an organization's name or description. Omitted fields are kept."""
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class OrganizationSummary(DocumentModel):
    """Organization as shown to members (no invite tokens)."""
    id: str
    name: str
    description: Optional[str] = None
    roles: list[str] = Field(default_factory=list)
    owner_id: Optional[str] = None
    user_role: Optional[str] = None


class RoleCreate(DocumentModel):
    """Add a role name to the organization."""
    name: str = Field(..., max_length=100)


class InviteCreate(DocumentModel):
    """Issue an invite link."""
    expires_in_days: Optional[int] = None


class InviteLinkResponse(DocumentModel):
    """Issued invite link with its shareable URL."""
    token: str
    created_at: datetime
    expires_at: datetime
    invite_url: str


class InviteValidationResponse(DocumentModel):
    """Result of validating an invite URL."""
    valid: bool
    reason: Optional[str] = None
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    organization_description: Optional[str] = None


class RoleRename(DocumentModel):
    """New name for an existing role."""
    name: str = Field(..., max_length=100)
