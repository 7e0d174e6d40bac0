"""
Invite token service.

Invite links are bearer credentials scoped to one organization:
`/invite?orgId={orgId}&token={token}`. A token is active iff it is unexpired
and string-equal to one stored on the organization. Links stay valid for
any number of joins until they expire or an admin revokes them.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from lastcall.core.config import settings
from lastcall.core.context import RequestContext
from lastcall.core.exceptions import (
    ExpiredError, InvalidTokenError, NotFoundError, ValidationError,
)
from lastcall.core.permissions import require_admin
from lastcall.schemas.common import utcnow
from lastcall.schemas.organization import InviteLink, Organization
from lastcall.store import DocumentStore, paths

logger = logging.getLogger(__name__)

INVITE_PATH = "/invite"

REASON_INVALID_TOKEN = "invalid_token"
REASON_NOT_FOUND = "not_found"
REASON_EXPIRED = "expired"


@dataclass
class InviteValidation:
    valid: bool
    organization: Optional[Organization] = None
    reason: Optional[str] = None


def build_invite_url(org_id: str, token: str, base_url: Optional[str] = None) -> str:
    """Shareable invite URL for a token."""
    base = (base_url or settings.SITE_URL).rstrip("/")
    return f"{base}{INVITE_PATH}?{urlencode({'orgId': org_id, 'token': token})}"


def parse_invite_url(url: str) -> tuple[Optional[str], Optional[str]]:
    """Return (org_id, token) from an invite URL; missing parts are None."""
    query = parse_qs(urlparse(url).query)
    org_id = query.get("orgId", [None])[0]
    token = query.get("token", [None])[0]
    return org_id or None, token or None


def _find_link(org: Organization, token: str) -> Optional[InviteLink]:
    for link in org.invite_links:
        if link.token == token:
            return link
    return None


class InviteTokenService:
    """Issues, validates and revokes organization invite links."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def issue(
        self,
        ctx: RequestContext,
        org_id: str,
        expires_in_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> InviteLink:
        """
        Issue a new invite link for the organization.

        Expired links are dropped from the organization's set at the same
        time. Raises ValidationError when the lifetime is out of range.
        """
        await require_admin(self.store, ctx, org_id)

        days = settings.INVITE_TTL_DAYS if expires_in_days is None else expires_in_days
        if days < 1 or days > settings.INVITE_MAX_TTL_DAYS:
            raise ValidationError(
                f"Invite expiry must be between 1 and {settings.INVITE_MAX_TTL_DAYS} days"
            )

        now = now or utcnow()
        org = await self.store.read(paths.organization(org_id), Organization)
        link = InviteLink(
            token=secrets.token_urlsafe(24),
            created_at=now,
            expires_at=now + timedelta(days=days),
            created_by=ctx.user_id,
        )
        active = [existing for existing in org.invite_links if existing.is_active(now)]
        pruned = len(org.invite_links) - len(active)
        org.invite_links = [*active, link]
        await self.store.update(
            paths.organization(org_id),
            {"inviteLinks": [i.model_dump(mode="json", by_alias=True) for i in org.invite_links]},
        )

        logger.info(f"Invite issued: org={org_id}, by={ctx.user_id}, expires={link.expires_at.isoformat()}")
        if pruned:
            logger.debug(f"Pruned {pruned} expired invite links for org {org_id}")
        return link

    async def validate(
        self,
        org_id: Optional[str],
        token: Optional[str],
        now: Optional[datetime] = None,
    ) -> InviteValidation:
        """
        Check an invite without side effects.

        Missing arguments are invalid without a store lookup.
        """
        if not org_id or not token:
            return InviteValidation(valid=False, reason=REASON_INVALID_TOKEN)

        try:
            org = await self.store.read(paths.organization(org_id), Organization)
        except ValueError:
            return InviteValidation(valid=False, reason=REASON_NOT_FOUND)
        if org is None:
            return InviteValidation(valid=False, reason=REASON_NOT_FOUND)

        link = _find_link(org, token)
        if link is None:
            return InviteValidation(valid=False, organization=org, reason=REASON_INVALID_TOKEN)
        if not link.is_active(now or utcnow()):
            return InviteValidation(valid=False, organization=org, reason=REASON_EXPIRED)
        return InviteValidation(valid=True, organization=org)

    async def require_valid(
        self,
        org_id: Optional[str],
        token: Optional[str],
        now: Optional[datetime] = None,
    ) -> Organization:
        """Return the organization of a valid invite or raise."""
        result = await self.validate(org_id, token, now=now)
        if result.valid:
            return result.organization
        if result.reason == REASON_NOT_FOUND:
            raise NotFoundError("Organization not found")
        if result.reason == REASON_EXPIRED:
            raise ExpiredError("Invite link has expired")
        raise InvalidTokenError("Invalid invite token")

    async def revoke(self, ctx: RequestContext, org_id: str, token: str) -> None:
        await require_admin(self.store, ctx, org_id)
        org = await self.store.read(paths.organization(org_id), Organization)
        remaining = [link for link in org.invite_links if link.token != token]
        if len(remaining) == len(org.invite_links):
            raise NotFoundError("Invite link not found")
        await self.store.update(
            paths.organization(org_id),
            {"inviteLinks": [i.model_dump(mode="json", by_alias=True) for i in remaining]},
        )
        logger.info(f"Invite revoked: org={org_id}, by={ctx.user_id}")
