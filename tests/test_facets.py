"""Tests for the faceted listing queries and visibility rules."""

from datetime import datetime

import pytest

from storage.repositories import Facet, SnippetRepository, page_window


@pytest.mark.parametrize(
    "page, page_size, expected",
    [
        (1, 5, (0, 5)),
        (3, 5, (10, 5)),
        (0, 5, (0, 5)),
        (-4, 5, (0, 5)),
        (2, 0, (1, 1)),
    ],
)
def test_page_window(page: int, page_size: int, expected) -> None:
    assert page_window(page, page_size) == expected


@pytest.fixture
async def catalog(make_user, make_snippet):
    alice = await make_user("alice")
    pending = await make_user("pending", is_approved=False)
    public = [await make_snippet(alice, title=f"Public {i}") for i in range(7)]
    private = await make_snippet(alice, title="Private one", is_private=True)
    hidden = await make_snippet(pending, title="From pending user")
    return {"alice": alice, "pending": pending, "public": public, "private": private, "hidden": hidden}


async def test_count_all_excludes_private_and_unapproved(db_session, catalog) -> None:
    assert await SnippetRepository(db_session).count_all() == 7


async def test_pages_cover_every_visible_snippet_once(db_session, catalog) -> None:
    repo = SnippetRepository(db_session)

    page1 = await repo.page_all(1, 5)
    page2 = await repo.page_all(2, 5)
    page3 = await repo.page_all(3, 5)

    assert len(page1) == 5
    assert len(page2) == 2
    assert page3 == []
    ids = [s.id for s in page1 + page2]
    assert sorted(ids) == sorted(s.id for s in catalog["public"])


async def test_page_below_one_is_first_page(db_session, catalog) -> None:
    repo = SnippetRepository(db_session)
    first = [s.id for s in await repo.page_all(1, 5)]
    assert [s.id for s in await repo.page_all(0, 5)] == first
    assert [s.id for s in await repo.page_all(-2, 5)] == first


async def test_listing_is_newest_first(db_session, catalog) -> None:
    page = await SnippetRepository(db_session).page_all(1, 10)
    assert [s.id for s in page] == [s.id for s in reversed(catalog["public"])]


async def test_same_timestamp_ties_broken_by_id(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    moment = datetime(2030, 1, 1)
    older = await make_snippet(alice, created_at=moment)
    newer = await make_snippet(alice, created_at=moment)

    page = await SnippetRepository(db_session).page_all(1, 2)

    assert [s.id for s in page] == [newer.id, older.id]


async def test_projection_carries_joined_names(db_session, make_user, make_snippet, make_category, make_language) -> None:
    alice = await make_user("alice")
    category = await make_category("Web Dev")
    language = await make_language("Python")
    await make_snippet(alice, category_id=category.id, language_id=language.id)

    [view] = await SnippetRepository(db_session).page_all(1, 5)

    assert view.category_name == "Web Dev"
    assert view.category_slug == "web-dev"
    assert view.language_name == "Python"
    assert view.language_slug == "python"
    assert view.author_name == "alice"


async def test_category_and_language_facets(db_session, make_user, make_snippet, make_category, make_language) -> None:
    alice = await make_user("alice")
    web = await make_category("Web")
    ops = await make_category("Ops")
    python = await make_language("Python")
    await make_snippet(alice, category_id=web.id, language_id=python.id)
    await make_snippet(alice, category_id=web.id)
    await make_snippet(alice, category_id=web.id, is_private=True)
    await make_snippet(alice, category_id=ops.id, language_id=python.id)
    repo = SnippetRepository(db_session)

    assert await repo.count_by_category(web.id) == 2
    assert len(await repo.page_by_category(web.id, 1, 5)) == 2
    assert await repo.count_by_category(ops.id) == 1
    assert await repo.count_by_language(python.id) == 2
    assert all(s.language_id == python.id for s in await repo.page_by_language(python.id, 1, 5))


async def test_author_and_owner_facets(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")
    await make_snippet(alice)
    await make_snippet(alice, is_private=True)
    await make_snippet(bob)
    repo = SnippetRepository(db_session)

    assert await repo.count_by_author("alice") == 1
    assert [s.author_name for s in await repo.page_by_author("alice", 1, 5)] == ["alice"]
    assert await repo.count_by_author("nobody") == 0
    assert await repo.count_by_owner(bob.id) == 1
    assert len(await repo.page_by_owner(bob.id, 1, 5)) == 1


async def test_tag_facet_matches_substrings(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    await make_snippet(alice, tags="java, spring")
    await make_snippet(alice, tags="javascript")
    await make_snippet(alice, tags="python")
    repo = SnippetRepository(db_session)

    # the tag facet is a substring match on the raw tag string, so "java" also hits "javascript"
    assert await repo.count_by_tag("java") == 2
    assert await repo.count_by_tag("spring") == 1
    assert len(await repo.page_by_tag("java", 1, 5)) == 2


async def test_search_matches_title_description_and_code(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    await make_snippet(alice, title="Parse JSON quickly")
    await make_snippet(alice, title="Other", description="uses json module")
    await make_snippet(alice, title="Third", code="import json")
    await make_snippet(alice, title="Unrelated")
    repo = SnippetRepository(db_session)

    assert await repo.count_search("JSON") == 3
    assert len(await repo.page_search("json", 1, 10)) == 3


async def test_search_skips_private_hits(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    await make_snippet(alice, title="needle in public")
    await make_snippet(alice, title="needle in private", is_private=True)
    repo = SnippetRepository(db_session)

    assert await repo.count_search("needle") == 1
    assert [s.title for s in await repo.page_search("needle", 1, 10)] == ["needle in public"]


async def test_search_treats_wildcards_literally(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    await make_snippet(alice, title="100% done")
    await make_snippet(alice, title="1000 done")
    await make_snippet(alice, title="snake_case")
    await make_snippet(alice, title="snakeXcase")
    repo = SnippetRepository(db_session)

    assert await repo.count_search("100%") == 1
    assert await repo.count_search("snake_case") == 1


async def test_count_matches_page_filter_for_every_facet(db_session, make_user, make_snippet, make_category) -> None:
    alice = await make_user("alice")
    pending = await make_user("pending", is_approved=False)
    web = await make_category("Web")
    for owner in (alice, pending):
        await make_snippet(owner, title="cli helper", tags="cli", category_id=web.id)
        await make_snippet(owner, title="cli private", tags="cli", category_id=web.id, is_private=True)
    repo = SnippetRepository(db_session)

    cases = [
        (Facet.ALL, None),
        (Facet.CATEGORY, web.id),
        (Facet.AUTHOR, "alice"),
        (Facet.OWNER, alice.id),
        (Facet.TAG, "cli"),
        (Facet.SEARCH, "cli"),
    ]
    for facet, value in cases:
        total = await repo.count_facet(facet, value)
        items = await repo.page_facet(facet, value, 1, 100)
        assert total == len(items) == 1, facet


async def test_find_by_identifier_respects_visibility(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")
    admin = await make_user("root", is_admin=True)
    public = await make_snippet(alice, title="Open")
    private = await make_snippet(alice, title="Closed", is_private=True)
    repo = SnippetRepository(db_session)

    assert (await repo.find_by_identifier(public.slug)).id == public.id
    assert (await repo.find_by_identifier(public.short_id)).id == public.id
    assert await repo.find_by_identifier(private.slug) is None
    assert await repo.find_by_identifier(private.slug, viewer=bob) is None
    assert (await repo.find_by_identifier(private.slug, viewer=alice)).id == private.id
    assert (await repo.find_by_identifier(private.short_id, viewer=admin)).id == private.id
    assert await repo.find_by_identifier("missing") is None


async def test_find_by_identifier_prefers_slug_over_short_id(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    by_short_id = await make_snippet(alice, title="First", short_id="abcd1234")
    by_slug = await make_snippet(alice, title="Second", slug="abcd1234")
    repo = SnippetRepository(db_session)

    assert (await repo.find_by_identifier("abcd1234")).id == by_slug.id
    assert by_short_id.id < by_slug.id


async def test_recent_owner_and_admin_listings(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    pending = await make_user("pending", is_approved=False)
    for i in range(6):
        await make_snippet(alice, title=f"Public {i}")
    private = await make_snippet(alice, is_private=True)
    await make_snippet(pending)
    repo = SnippetRepository(db_session)

    recent = await repo.find_recent(5)
    assert len(recent) == 5
    assert private.id not in [s.id for s in recent]

    own = await repo.list_for_owner(alice.id)
    assert len(own) == 7
    assert own[0].id == private.id

    assert len(await repo.list_all_for_admin()) == 8


async def test_search_hit_in_private_description_is_hidden(db_session, make_user, make_snippet) -> None:
    alice = await make_user("alice")
    await make_snippet(alice, title="Secret", description="foobar helpers", is_private=True)
    repo = SnippetRepository(db_session)

    assert await repo.count_search("foo") == 0
    assert await repo.page_search("foo", 1, 5) == []
