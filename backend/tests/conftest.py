"""
Test configuration and fixtures for LastCall backend tests.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from lastcall.main import app
from lastcall.db.base import Base, get_db
from lastcall.core.context import RequestContext
from lastcall.core.security import create_access_token
from lastcall.schemas.employee import Employee, UserProfile
from lastcall.schemas.organization import Organization
from lastcall.services.directory import OrganizationDirectory
from lastcall.services.notifications import NotificationDispatcher, get_notifier
from lastcall.store import DocumentStore, paths

import lastcall.models  # noqa: F401


class RecordingNotifier(NotificationDispatcher):
    """Dispatcher that keeps every notification instead of logging it."""

    def __init__(self):
        super().__init__()
        self.sent: list[dict] = []

    async def deliver(self, user_id, title, body, data):
        self.sent.append({"user_id": user_id, "title": title, "body": body, "data": data})


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a test database engine on a per-test SQLite file."""
    # File-based so every aiosqlite connection sees the same database
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def store(db_session: AsyncSession) -> DocumentStore:
    return DocumentStore(db_session)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession, notifier: RecordingNotifier
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session and notifier overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ============================================================================
# USERS
# ============================================================================

@pytest.fixture
def owner_ctx() -> RequestContext:
    return RequestContext(user_id="owner-1", email="owner@example.com")


@pytest.fixture
def worker_ctx() -> RequestContext:
    return RequestContext(user_id="worker-1", email="worker@example.com")


@pytest.fixture
def outsider_ctx() -> RequestContext:
    return RequestContext(user_id="outsider-1", email="outsider@example.com")


def headers_for(ctx: RequestContext) -> dict:
    """Authorization headers for a caller."""
    token = create_access_token(subject=ctx.user_id, email=ctx.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(owner_ctx: RequestContext) -> dict:
    return headers_for(owner_ctx)


@pytest.fixture
def worker_headers(worker_ctx: RequestContext) -> dict:
    return headers_for(worker_ctx)


@pytest.fixture
def outsider_headers(outsider_ctx: RequestContext) -> dict:
    return headers_for(outsider_ctx)


@pytest_asyncio.fixture
async def profiles(
    store: DocumentStore,
    owner_ctx: RequestContext,
    worker_ctx: RequestContext,
    outsider_ctx: RequestContext,
) -> dict[str, UserProfile]:
    """Profiles for the owner, a worker and an outsider."""
    created = {}
    for ctx, first, last in (
        (owner_ctx, "Olive", "Owner"),
        (worker_ctx, "Wes", "Worker"),
        (outsider_ctx, "Otto", "Outsider"),
    ):
        profile = UserProfile(user_id=ctx.user_id, email=ctx.email, first_name=first, last_name=last)
        await store.write(paths.user(ctx.user_id), profile)
        created[ctx.user_id] = profile
    return created


# ============================================================================
# ORGANIZATION
# ============================================================================

@pytest_asyncio.fixture
async def org(store: DocumentStore, owner_ctx: RequestContext, profiles) -> Organization:
    """Organization owned by owner-1."""
    return await OrganizationDirectory(store).create_organization(
        owner_ctx, "The Tap Room", "Neighbourhood bar"
    )


@pytest_asyncio.fixture
async def worker(store: DocumentStore, org: Organization, worker_ctx: RequestContext) -> Employee:
    """worker-1 as a plain employee of the organization."""
    employee = Employee(user_id=worker_ctx.user_id, name="Wes Worker", email=worker_ctx.email)
    await store.create(paths.employee(org.id, worker_ctx.user_id), employee)
    await OrganizationDirectory(store).add_membership(worker_ctx.user_id, org.id)
    return employee
