"""
Tests for invite link issuing and validation.
"""
from datetime import timedelta

import pytest

from lastcall.core.exceptions import (
    ExpiredError, InvalidTokenError, NotFoundError, UnauthorizedError, ValidationError,
)
from lastcall.schemas.common import utcnow
from lastcall.schemas.organization import Organization
from lastcall.services.invites import InviteTokenService, build_invite_url, parse_invite_url
from lastcall.store import paths


def test_invite_url_round_trip():
    url = build_invite_url("org123", "tok-en_1", base_url="https://lastcall.example/")
    assert url == "https://lastcall.example/invite?orgId=org123&token=tok-en_1"
    assert parse_invite_url(url) == ("org123", "tok-en_1")


def test_parse_invite_url_missing_parts():
    assert parse_invite_url("https://lastcall.example/invite?orgId=org123") == ("org123", None)
    assert parse_invite_url("https://lastcall.example/invite") == (None, None)


class TestIssue:

    @pytest.mark.asyncio
    async def test_issue_default_expiry(self, store, org, owner_ctx):
        link = await InviteTokenService(store).issue(owner_ctx, org.id)
        assert link.created_by == owner_ctx.user_id
        assert link.expires_at - link.created_at == timedelta(days=7)

        stored = await store.read(paths.organization(org.id), Organization)
        assert [i.token for i in stored.invite_links] == [link.token]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("days", [0, 31])
    async def test_issue_expiry_bounds(self, store, org, owner_ctx, days):
        with pytest.raises(ValidationError):
            await InviteTokenService(store).issue(owner_ctx, org.id, days)

    @pytest.mark.asyncio
    async def test_issue_prunes_expired_links(self, store, org, owner_ctx):
        service = InviteTokenService(store)
        old = await service.issue(owner_ctx, org.id, 1, now=utcnow() - timedelta(days=3))
        fresh = await service.issue(owner_ctx, org.id, 7)

        stored = await store.read(paths.organization(org.id), Organization)
        tokens = [link.token for link in stored.invite_links]
        assert fresh.token in tokens
        assert old.token not in tokens

    @pytest.mark.asyncio
    async def test_employee_cannot_issue(self, store, org, worker_ctx, worker):
        with pytest.raises(UnauthorizedError):
            await InviteTokenService(store).issue(worker_ctx, org.id)


class TestValidate:

    @pytest.mark.asyncio
    async def test_valid_token(self, store, org, owner_ctx):
        service = InviteTokenService(store)
        link = await service.issue(owner_ctx, org.id)
        result = await service.validate(org.id, link.token)
        assert result.valid
        assert result.organization.name == "The Tap Room"

    @pytest.mark.asyncio
    async def test_token_stays_valid_for_many_uses(self, store, org, owner_ctx):
        service = InviteTokenService(store)
        link = await service.issue(owner_ctx, org.id)
        assert (await service.validate(org.id, link.token)).valid
        assert (await service.validate(org.id, link.token)).valid

    @pytest.mark.asyncio
    async def test_expired_token(self, store, org, owner_ctx):
        service = InviteTokenService(store)
        link = await service.issue(owner_ctx, org.id, 1)
        later = link.expires_at + timedelta(seconds=1)

        result = await service.validate(org.id, link.token, now=later)
        assert not result.valid
        assert result.reason == "expired"
        with pytest.raises(ExpiredError):
            await service.require_valid(org.id, link.token, now=later)

    @pytest.mark.asyncio
    async def test_expiry_boundary_is_exclusive(self, store, org, owner_ctx):
        service = InviteTokenService(store)
        link = await service.issue(owner_ctx, org.id, 1)
        assert not (await service.validate(org.id, link.token, now=link.expires_at)).valid

    @pytest.mark.asyncio
    async def test_unknown_token(self, store, org, owner_ctx):
        service = InviteTokenService(store)
        await service.issue(owner_ctx, org.id)
        result = await service.validate(org.id, "not-a-token")
        assert result.reason == "invalid_token"
        with pytest.raises(InvalidTokenError):
            await service.require_valid(org.id, "not-a-token")

    @pytest.mark.asyncio
    async def test_missing_organization(self, store):
        service = InviteTokenService(store)
        assert (await service.validate("missing", "tok")).reason == "not_found"
        with pytest.raises(NotFoundError):
            await service.require_valid("missing", "tok")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("org_id,token", [("", "tok"), ("org", ""), (None, None)])
    async def test_missing_arguments(self, store, org_id, token):
        result = await InviteTokenService(store).validate(org_id, token)
        assert not result.valid
        assert result.reason == "invalid_token"
        assert result.organization is None


@pytest.mark.asyncio
async def test_revoke(store, org, owner_ctx):
    service = InviteTokenService(store)
    link = await service.issue(owner_ctx, org.id)
    await service.revoke(owner_ctx, org.id, link.token)
    assert (await service.validate(org.id, link.token)).reason == "invalid_token"
    with pytest.raises(NotFoundError):
        await service.revoke(owner_ctx, org.id, link.token)
