"""
Tests for the document store and path helpers.
"""
import pytest

from lastcall.core.exceptions import ConflictError, NotFoundError
from lastcall.schemas.employee import UserProfile
from lastcall.store import paths


def test_paths():
    assert paths.employee("org1", "u1") == "Organizations/org1/Employees/u1"
    assert paths.pending_employee("org1", "u1") == "Organizations/org1/PendingEmployees/u1"
    assert paths.week_schedule("org1", "org1_2025-06-02") == "Organizations/org1/weekSchedules/org1_2025-06-02"
    assert paths.parent("Organizations/org1/Employees/u1") == "Organizations/org1/Employees"


@pytest.mark.parametrize("segment", ["", "a/b"])
def test_bad_segments(segment):
    with pytest.raises(ValueError):
        paths.user(segment)


@pytest.mark.asyncio
async def test_create_only(store):
    await store.create("Users/u1", {"userId": "u1"})
    with pytest.raises(ConflictError):
        await store.create("Users/u1", {"userId": "u1", "email": "x@example.com"})
    assert await store.get("Users/u1") == {"userId": "u1"}


@pytest.mark.asyncio
async def test_typed_write_and_read(store):
    profile = UserProfile(user_id="u1", first_name="Ada", employee_org_ids=["org1"])
    await store.write(paths.user("u1"), profile)

    raw = await store.get(paths.user("u1"))
    assert raw["firstName"] == "Ada"
    assert raw["employeeOrgIds"] == ["org1"]
    assert await store.read(paths.user("u1"), UserProfile) == profile


@pytest.mark.asyncio
async def test_update_and_delete(store):
    with pytest.raises(NotFoundError):
        await store.update("Users/u1", {"email": "a@example.com"})

    await store.write("Users/u1", {"userId": "u1"})
    assert await store.update("Users/u1", {"email": "a@example.com"}) == {
        "userId": "u1", "email": "a@example.com"
    }
    assert await store.delete("Users/u1") is True
    assert await store.delete("Users/u1") is False


@pytest.mark.asyncio
async def test_list_is_one_level(store):
    await store.write("Organizations/o1", {"id": "o1"})
    await store.write("Organizations/o1/Employees/b", {"userId": "b"})
    await store.write("Organizations/o1/Employees/a", {"userId": "a"})
    await store.write("Organizations/o10/Employees/c", {"userId": "c"})

    assert [d["userId"] for d in await store.list("Organizations/o1/Employees")] == ["a", "b"]


@pytest.mark.asyncio
async def test_delete_tree_stays_inside_prefix(store):
    await store.write("Organizations/o1", {"id": "o1"})
    await store.write("Organizations/o1/Employees/a", {"userId": "a"})
    await store.write("Organizations/o10", {"id": "o10"})
    await store.write("Organizations/o10/Employees/c", {"userId": "c"})

    assert await store.delete_tree("Organizations/o1") == 2
    assert await store.get("Organizations/o1") is None
    assert await store.get("Organizations/o10/Employees/c") == {"userId": "c"}


@pytest.mark.asyncio
async def test_list_as_parses_models(store):
    await store.write(paths.user("b"), UserProfile(user_id="b", first_name="Bea"))
    await store.write(paths.user("a"), UserProfile(user_id="a", first_name="Al"))

    profiles = await store.list_as(paths.USERS, UserProfile)
    assert [p.first_name for p in profiles] == ["Al", "Bea"]
    assert all(isinstance(p, UserProfile) for p in profiles)


@pytest.mark.asyncio
async def test_lost_insert_race_keeps_session_usable(store, db_session, monkeypatch):
    await store.create("Users/u1", {"userId": "u1"})
    db_session.expunge_all()

    async def not_loaded(path):
        return None

    # Another writer got there between the existence check and the insert
    monkeypatch.setattr(store, "_load", not_loaded)
    with pytest.raises(ConflictError):
        await store.create("Users/u1", {"userId": "late"})
    monkeypatch.undo()

    await store.create("Users/u2", {"userId": "u2"})
    assert await store.get("Users/u1") == {"userId": "u1"}
    assert await store.get("Users/u2") == {"userId": "u2"}
