"""Tests for ownership-scoped updates and deletes."""

import pytest

from errors import AuthorizationDeniedError, NotFoundError
from routers.services.snippet_service import SnippetService
from storage.policies import OwnershipGuard
from storage.repositories import SnippetRepository


@pytest.fixture
async def people(make_user):
    return {
        "alice": await make_user("alice"),
        "bob": await make_user("bob"),
        "admin": await make_user("root", is_admin=True),
    }


async def test_authorize_mutation(people, make_snippet) -> None:
    snippet = await make_snippet(people["alice"])

    assert OwnershipGuard.authorize_mutation(snippet, people["alice"])
    assert OwnershipGuard.authorize_mutation(snippet, people["admin"])
    assert not OwnershipGuard.authorize_mutation(snippet, people["bob"])


async def test_scoped_update_by_other_user_changes_nothing(db_session, people, make_snippet) -> None:
    snippet = await make_snippet(people["alice"], title="Original")
    repo = SnippetRepository(db_session)

    affected = await repo.update_scoped(snippet.id, people["bob"], title="Hijacked")
    await db_session.refresh(snippet)

    assert affected == 0
    assert snippet.title == "Original"


async def test_scoped_delete_by_other_user_changes_nothing(db_session, people, make_snippet) -> None:
    snippet = await make_snippet(people["alice"])
    repo = SnippetRepository(db_session)

    assert await repo.delete_scoped(snippet.id, people["bob"]) == 0
    assert await repo.count() == 1


async def test_admin_can_update_and_delete_any_snippet(db_session, people, make_snippet) -> None:
    snippet = await make_snippet(people["alice"], title="Original")
    repo = SnippetRepository(db_session)

    assert await repo.update_scoped(snippet.id, people["admin"], title="Edited") == 1
    await db_session.refresh(snippet)
    assert snippet.title == "Edited"

    assert await repo.delete_scoped(snippet.id, people["admin"]) == 1
    assert await repo.count() == 0


async def test_get_for_edit_distinguishes_missing_and_forbidden(db_session, people, make_snippet) -> None:
    snippet = await make_snippet(people["alice"])
    service = SnippetService(db_session)

    assert (await service.get_for_edit(snippet.id, people["alice"])).id == snippet.id
    assert (await service.get_for_edit(snippet.id, people["admin"])).id == snippet.id
    with pytest.raises(AuthorizationDeniedError):
        await service.get_for_edit(snippet.id, people["bob"])
    with pytest.raises(NotFoundError):
        await service.get_for_edit(9999, people["alice"])


async def test_update_snippet_by_owner(db_session, people) -> None:
    service = SnippetService(db_session)
    created = await service.create_snippet(owner_id=people["alice"].id, title="First Title", code="a")
    short_id, created_at = created.short_id, created.created_at

    updated = await service.update_snippet(
        created.id, people["alice"], title="Second Title", code="b", tags="cli", is_private=True
    )

    assert updated.slug == "second-title"
    assert updated.code == "b"
    assert updated.tags == "cli"
    assert updated.is_private is True
    assert updated.short_id == short_id
    assert updated.created_at == created_at


async def test_update_snippet_keeps_slug_for_same_title(db_session, people) -> None:
    service = SnippetService(db_session)
    created = await service.create_snippet(owner_id=people["alice"].id, title="Same", code="a")

    updated = await service.update_snippet(created.id, people["alice"], title="Same", code="b")

    assert updated.slug == created.slug == "same"


async def test_update_snippet_rejected_for_other_user_or_missing(db_session, people, make_snippet) -> None:
    snippet = await make_snippet(people["alice"], title="Original")
    service = SnippetService(db_session)

    assert await service.update_snippet(snippet.id, people["bob"], title="Hijacked", code="x") is None
    assert await service.update_snippet(9999, people["alice"], title="Ghost", code="x") is None
    await db_session.refresh(snippet)
    assert snippet.title == "Original"


async def test_remove_snippet(db_session, people, make_snippet) -> None:
    snippet = await make_snippet(people["alice"])
    service = SnippetService(db_session)

    assert await service.remove_snippet(snippet.id, people["bob"]) == 0
    assert await service.remove_snippet(snippet.id, people["alice"]) == 1
    assert await service.remove_snippet(snippet.id, people["alice"]) == 0
