"""Tests for categories and languages."""

import pytest

from errors import ConflictError, NotFoundError
from routers.services.taxonomy_service import CategoryService, LanguageService
from storage.repositories import SnippetRepository


async def test_create_derives_slug(db_session) -> None:
    category = await CategoryService(db_session).create("Web Dev")
    assert category.slug == "web-dev"


async def test_duplicate_name_is_a_conflict(db_session) -> None:
    service = CategoryService(db_session)
    await service.create("Web Dev")
    with pytest.raises(ConflictError):
        await service.create("Web Dev")


async def test_list_all_ordered_by_name(db_session) -> None:
    service = LanguageService(db_session)
    for name in ("Rust", "Go", "Python"):
        await service.create(name)

    assert [item.name for item in await service.list_all()] == ["Go", "Python", "Rust"]


async def test_lookup_by_name_then_slug(db_session) -> None:
    service = CategoryService(db_session)
    category = await service.create("Web Dev")

    assert (await service.lookup("Web Dev")).id == category.id
    assert (await service.lookup("web dev")).id == category.id
    assert (await service.lookup("web-dev")).id == category.id
    with pytest.raises(NotFoundError):
        await service.lookup("Databases")


async def test_get_by_slug_missing(db_session) -> None:
    with pytest.raises(NotFoundError):
        await LanguageService(db_session).get_by_slug("cobol")


async def test_rename_updates_slug(db_session) -> None:
    service = CategoryService(db_session)
    category = await service.create("Web Dev")

    renamed = await service.rename(category.id, "Frontend")

    assert renamed.name == "Frontend"
    assert renamed.slug == "frontend"
    with pytest.raises(NotFoundError):
        await service.rename(9999, "Nothing")


async def test_remove_keeps_snippets_and_clears_reference(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    service = CategoryService(db_session)
    category = await service.create("Web Dev")
    snippet = await make_snippet(alice, category_id=category.id)

    assert await service.remove(category.id) is True
    await db_session.refresh(snippet)

    assert snippet.category_id is None
    assert await SnippetRepository(db_session).count() == 1
    with pytest.raises(NotFoundError):
        await service.remove(category.id)


async def test_counts_only_visible_snippets(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    pending = await make_user("pending", is_approved=False)
    service = LanguageService(db_session)
    python = await service.create("Python")
    rust = await service.create("Rust")
    await service.create("Go")
    await make_snippet(alice, language_id=python.id)
    await make_snippet(alice, language_id=python.id)
    await make_snippet(alice, language_id=python.id, is_private=True)
    await make_snippet(pending, language_id=rust.id)

    counts = await service.list_with_counts()

    assert counts == [{"id": python.id, "name": "Python", "slug": "python", "count": 2}]
