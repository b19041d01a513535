"""Tests for the management command line tool."""

from datetime import datetime

import pytest

from rich.console import Console
from rich.prompt import Confirm

from scripts.manage import build_parser, build_snippet_table, infer_title_from_filename, run_command
from storage.database import create_session_factory
from storage.models import Language, Snippet, User
from storage.repositories import SnippetRepository, SnippetView


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("my_backup-script.sh", "My Backup Script"),
        ("/tmp/deploy.py", "Deploy"),
        ("README", "README"),
    ],
)
def test_infer_title_from_filename(filename: str, expected: str) -> None:
    assert infer_title_from_filename(filename) == expected


def _view(**fields) -> SnippetView:
    values = {
        "id": 1, "title": "Long title here", "slug": "long-title-here", "short_id": "abcd1234",
        "description": None, "code": "x", "tags": None, "reference_url": None, "is_private": True,
        "created_at": datetime(2024, 3, 5), "user_id": 1, "category_id": None, "language_id": None,
        "category_name": None, "category_slug": None, "language_name": "Python", "language_slug": "python",
        "author_name": "alice",
    }
    values.update(fields)
    return SnippetView(**values)


def test_snippet_table_renders_every_column() -> None:
    console = Console(record=True, width=160)
    console.print(build_snippet_table([_view(), _view(id=2, title="[bold]raw[/bold]", is_private=False)]))
    output = console.export_text()

    for header in ("ID", "Title", "Author", "Category", "Language", "Private", "Created At"):
        assert header in output
    assert "Long title here" in output
    assert "alice" in output
    assert "N/A" in output
    assert "2024-03-05" in output
    assert "Yes" in output and "No" in output
    assert "[bold]raw[/bold]" in output


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


@pytest.fixture
async def session_factory(engine):
    factory = create_session_factory(engine)
    async with factory() as session:
        session.add(User(username="alice", email="alice@example.com", password_hash="x", is_approved=True))
        session.add(Language(name="Python", slug="python"))
        await session.commit()
    return factory


async def test_create_from_file_infers_title_and_language(session_factory, tmp_path) -> None:
    source = tmp_path / "parse_args.py"
    source.write_text("import argparse\n", encoding="utf-8")
    args = build_parser().parse_args(["create", str(source), "--user", "alice", "--tags", "cli", "--private"])

    assert await run_command(session_factory, args) == 0

    async with session_factory() as session:
        [snippet] = await SnippetRepository(session).query_by_filters(filters={})
        assert snippet.title == "Parse Args"
        assert snippet.slug == "parse-args"
        assert snippet.code == "import argparse\n"
        assert snippet.tags == "cli"
        assert snippet.is_private is True
        assert snippet.language_id is not None


async def test_create_with_unknown_owner_fails(session_factory, tmp_path) -> None:
    source = tmp_path / "x.py"
    source.write_text("x = 1\n", encoding="utf-8")
    args = build_parser().parse_args(["create", str(source), "--user", "nobody"])

    assert await run_command(session_factory, args) == 1


async def test_list_and_delete(session_factory, capsys) -> None:
    async with session_factory() as session:
        alice = (await session.execute(User.__table__.select())).first()
        session.add(Snippet(
            title="To Delete", slug="to-delete", short_id="abcd1234", code="x",
            user_id=alice.id, created_at=datetime(2024, 1, 1)
        ))
        await session.commit()

    assert await run_command(session_factory, build_parser().parse_args(["list"])) == 0
    assert "To Delete" in capsys.readouterr().out

    assert await run_command(session_factory, build_parser().parse_args(["delete", "999", "--yes"])) == 1
    assert await run_command(session_factory, build_parser().parse_args(["delete", "1", "--yes"])) == 0

    async with session_factory() as session:
        assert await SnippetRepository(session).count() == 0


async def test_delete_cancelled_when_not_confirmed(session_factory, monkeypatch, capsys) -> None:
    async with session_factory() as session:
        alice = (await session.execute(User.__table__.select())).first()
        session.add(Snippet(
            title="Keep Me", slug="keep-me", short_id="keep1234", code="x",
            user_id=alice.id, created_at=datetime(2024, 1, 1)
        ))
        await session.commit()
    monkeypatch.setattr(Confirm, "ask", lambda *args, **kwargs: False)

    assert await run_command(session_factory, build_parser().parse_args(["delete", "1"])) == 0
    assert "已取消删除" in capsys.readouterr().out

    async with session_factory() as session:
        assert await SnippetRepository(session).count() == 1
