"""Tests for user management and API key authentication."""

import re

import pytest

from errors import ConflictError, NotFoundError
from routers.services.user_service import UserService
from storage.repositories import SnippetRepository
from utils.security import generate_api_key, hash_password, verify_password


def test_password_hash_round_trip() -> None:
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_api_key_is_32_hex_chars() -> None:
    assert re.fullmatch(r"[0-9a-f]{32}", generate_api_key())


async def test_register_creates_unapproved_user(db_session) -> None:
    user = await UserService(db_session).register("carol", "carol@example.com", "pw")

    assert user.is_approved is False
    assert user.is_admin is False
    assert verify_password("pw", user.password_hash)


async def test_admin_created_user_is_approved(db_session) -> None:
    user = await UserService(db_session).create_by_admin("dave", "dave@example.com", "pw", is_admin=True)

    assert user.is_approved is True
    assert user.is_admin is True


async def test_duplicate_username_is_a_conflict(db_session, make_user) -> None:
    await make_user("alice")
    with pytest.raises(ConflictError):
        await UserService(db_session).register("alice", "other@example.com", "pw")


async def test_api_key_only_authenticates_approved_users(db_session, make_user) -> None:
    await make_user("alice", api_key="alice-key")
    await make_user("pending", is_approved=False, api_key="pending-key")
    service = UserService(db_session)

    assert (await service.authenticate_api_key("alice-key")).username == "alice"
    assert await service.authenticate_api_key("pending-key") is None
    assert await service.authenticate_api_key("unknown") is None
    assert await service.authenticate_api_key("") is None


async def test_set_approval(db_session, make_user) -> None:
    pending = await make_user("pending", is_approved=False)
    service = UserService(db_session)

    assert (await service.set_approval(pending.id, True)).is_approved is True
    with pytest.raises(NotFoundError):
        await service.set_approval(9999, True)


async def test_update_email_rejects_address_in_use(db_session, make_user) -> None:
    alice = await make_user("alice")
    await make_user("bob")
    service = UserService(db_session)

    with pytest.raises(ConflictError):
        await service.update_email(alice.id, "bob@example.com")
    assert (await service.update_email(alice.id, "alice@example.com")).email == "alice@example.com"
    assert (await service.update_email(alice.id, "new@example.com")).email == "new@example.com"


async def test_regenerate_api_key(db_session, make_user) -> None:
    alice = await make_user("alice", api_key="old-key")
    service = UserService(db_session)

    new_key = await service.regenerate_api_key(alice.id)

    assert new_key != "old-key"
    assert await service.authenticate_api_key("old-key") is None
    assert (await service.authenticate_api_key(new_key)).id == alice.id


async def test_delete_user_removes_their_snippets(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")
    await make_snippet(alice)
    await make_snippet(alice)
    await make_snippet(bob)
    service = UserService(db_session)

    assert await service.delete_user(alice.id) is True
    assert await SnippetRepository(db_session).count() == 1
    assert await service.delete_user(alice.id) is False
