"""
Tests for user profile operations.
"""

import uuid

import pytest

from core.errors import ErrorKind


class TestUserService:
    @pytest.mark.asyncio
    async def test_get_profile(self, user_service, alice):
        result = await user_service.get_profile(str(alice.id))
        assert result.value.email == "alice@example.com"
        assert "password" not in result.value.model_dump_json()

    @pytest.mark.asyncio
    async def test_unknown_user(self, user_service):
        result = await user_service.get_user(str(uuid.uuid4()))
        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.message == "User not found"

    @pytest.mark.asyncio
    async def test_list_users_without_hashes(self, user_service, alice, bob):
        result = await user_service.list_users()
        assert {u.email for u in result.value} == {"alice@example.com", "bob@example.com"}
        for user in result.value:
            assert "password" not in user.model_dump_json()

    @pytest.mark.asyncio
    async def test_update_name_keeps_email(self, user_service, alice):
        result = await user_service.update_profile(str(alice.id), name="Alicia")
        assert result.value.name == "Alicia"
        assert result.value.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_update_email_normalized_and_unique(self, user_service, alice, bob):
        moved = await user_service.update_profile(str(alice.id), email="Alice2@Example.com")
        assert moved.value.email == "alice2@example.com"

        clash = await user_service.update_profile(str(bob.id), email="ALICE2@example.com")
        assert clash.error.kind is ErrorKind.DUPLICATE_EMAIL

    @pytest.mark.asyncio
    async def test_password_change_rehashes(self, user_service, auth_service, alice):
        await user_service.update_profile(str(alice.id), password="NewPassword1!")
        old = await auth_service.sign_in("alice@example.com", "Password123!")
        new = await auth_service.sign_in("alice@example.com", "NewPassword1!")
        assert old.error.kind is ErrorKind.INVALID_CREDENTIALS
        assert new.ok

    @pytest.mark.asyncio
    async def test_update_vanished_user(self, user_service):
        result = await user_service.update_profile(str(uuid.uuid4()), name="Nobody")
        assert result.error.kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_account_removes_tasks(self, user_service, task_service, gateway, alice):
        created = await task_service.create("T", None, str(alice.id))
        deleted = await user_service.delete_account(str(alice.id))
        assert deleted.ok
        assert await gateway.find_task_by_id(str(created.value.id)) is None

        again = await user_service.delete_account(str(alice.id))
        assert again.error.kind is ErrorKind.NOT_FOUND
