"""
Tests for ownership-scoped task operations.
"""

import uuid

import pytest

from core.errors import ErrorKind
from utils.schemas import TaskStatus


async def _create(task_service, owner, title="T", description=None):
    result = await task_service.create(title, description, str(owner.id))
    assert result.ok
    return result.value


class TestCreateAndList:
    @pytest.mark.asyncio
    async def test_create_sets_owner_and_defaults(self, task_service, alice):
        task = await _create(task_service, alice, "Write report", "Quarterly")
        assert task.owner_id == alice.id
        assert task.status is TaskStatus.TODO
        assert task.description == "Quarterly"

    @pytest.mark.asyncio
    async def test_list_newest_first_and_scoped(self, task_service, alice, bob):
        await _create(task_service, alice, "First")
        await _create(task_service, alice, "Second")
        await _create(task_service, bob, "Bob's")

        result = await task_service.list(str(alice.id))
        assert [t.title for t in result.value] == ["Second", "First"]

    @pytest.mark.asyncio
    async def test_list_empty(self, task_service, alice):
        result = await task_service.list(str(alice.id))
        assert result.ok and result.value == []

    @pytest.mark.asyncio
    async def test_missing_owner(self, task_service):
        result = await task_service.create("T", None, str(uuid.uuid4()))
        assert result.error.kind is ErrorKind.OWNER_NOT_FOUND


class TestOwnershipOpacity:
    @pytest.mark.asyncio
    async def test_foreign_task_looks_like_missing_task(self, task_service, alice, bob):
        task = await _create(task_service, alice)
        ghost = str(uuid.uuid4())
        bob_id = str(bob.id)

        results = [
            await task_service.get_by_id(str(task.id), bob_id),
            await task_service.update(str(task.id), bob_id, title="pwned"),
            await task_service.delete(str(task.id), bob_id),
            await task_service.get_by_id(ghost, bob_id),
            await task_service.update(ghost, bob_id, title="pwned"),
            await task_service.delete(ghost, bob_id),
        ]
        errors = {r.error for r in results}
        assert len(errors) == 1
        assert errors.pop().kind is ErrorKind.NOT_FOUND

        still_there = await task_service.get_by_id(str(task.id), str(alice.id))
        assert still_there.value.title == "T"

    @pytest.mark.asyncio
    async def test_non_uuid_id_is_not_found(self, task_service, alice):
        result = await task_service.get_by_id("not-a-uuid", str(alice.id))
        assert result.error.kind is ErrorKind.NOT_FOUND


class TestUpdate:
    @pytest.mark.asyncio
    async def test_completed_alias_sets_done(self, task_service, alice):
        task = await _create(task_service, alice)
        result = await task_service.update(str(task.id), str(alice.id), status="completed")
        assert result.value.status is TaskStatus.DONE
        assert result.value.title == "T"

    @pytest.mark.asyncio
    async def test_status_case_insensitive(self, task_service, alice):
        task = await _create(task_service, alice)
        result = await task_service.update(str(task.id), str(alice.id), status="in_progress")
        assert result.value.status is TaskStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_bogus_status_ignored_title_applied(self, task_service, alice):
        task = await _create(task_service, alice)
        await task_service.update(str(task.id), str(alice.id), status="DONE")
        result = await task_service.update(str(task.id), str(alice.id), title="T2", status="bogus")
        assert result.value.title == "T2"
        assert result.value.status is TaskStatus.DONE

    @pytest.mark.asyncio
    async def test_absent_fields_untouched_and_none_clears(self, task_service, alice):
        task = await _create(task_service, alice, "T", "keep me")
        renamed = await task_service.update(str(task.id), str(alice.id), title="T2")
        assert renamed.value.description == "keep me"

        cleared = await task_service.update(str(task.id), str(alice.id), description=None)
        assert cleared.value.description is None
        assert cleared.value.title == "T2"

    @pytest.mark.asyncio
    async def test_row_vanishing_after_check_is_not_found(self, task_service, gateway, alice, monkeypatch):
        task = await _create(task_service, alice)
        original = gateway.find_task_by_id

        async def find_then_vanish(task_id):
            found = await original(task_id)
            await gateway.delete_task(task_id)
            return found

        monkeypatch.setattr(gateway, "find_task_by_id", find_then_vanish)
        result = await task_service.update(str(task.id), str(alice.id), title="late")
        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.message == "Task not found"


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_then_get_is_not_found(self, task_service, alice):
        task = await _create(task_service, alice)
        deleted = await task_service.delete(str(task.id), str(alice.id))
        assert deleted.ok
        again = await task_service.get_by_id(str(task.id), str(alice.id))
        assert again.error.kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_row_vanishing_after_check_is_not_found(self, task_service, gateway, alice, monkeypatch):
        task = await _create(task_service, alice)
        original = gateway.find_task_by_id

        async def find_then_vanish(task_id):
            found = await original(task_id)
            await gateway.delete_task(task_id)
            return found

        monkeypatch.setattr(gateway, "find_task_by_id", find_then_vanish)
        result = await task_service.delete(str(task.id), str(alice.id))
        assert result.error.kind is ErrorKind.NOT_FOUND
