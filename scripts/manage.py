"""
片段管理命令行工具

用法:
    python scripts/manage.py list
    python scripts/manage.py delete <id> [--yes]
    python scripts/manage.py create <文件路径> [--user 用户名] [--title 标题] [--category 分类]
                                   [--language 语言] [--tags "cli, script"] [--private]
"""
# 标准库导包
import argparse
import asyncio
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# 第三方库导包
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# 项目内部导包
from config import settings
from errors import CatalogError
from storage import create_engine, create_session_factory, init_db, cleanup_db
from storage.repositories import SnippetRepository, SnippetView
from routers.services.snippet_service import SnippetService
from routers.services.taxonomy_service import CategoryService, LanguageService
from routers.services.user_service import UserService
from utils.language_map import language_for_extension

# 配置日志
logger = logging.getLogger(__name__)

TABLE_HEADERS = ["ID", "Title", "Author", "Category", "Language", "Private", "Created At"]

console = Console()


@dataclass
class CliActor:
    """命令行操作者，拥有管理员权限"""
    id: int = 0
    is_admin: bool = True


def infer_title_from_filename(filename: str) -> str:
    """
    根据文件名生成标题

    去掉扩展名，按 - 和 _ 拆分，每个单词首字母大写
    例如 my_backup-script.sh -> My Backup Script
    """
    stem = Path(filename).stem
    words = [word for word in re.split(r"[-_]", stem) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def snippet_rows(snippets: Sequence[SnippetView]) -> List[List[str]]:
    """把片段投影转换为表格行，列顺序与 TABLE_HEADERS 一致"""
    return [
        [
            str(s.id),
            escape(s.title),
            escape(s.author_name or "N/A"),
            escape(s.category_name or "N/A"),
            escape(s.language_name or "N/A"),
            "Yes" if s.is_private else "No",
            s.created_at.strftime("%Y-%m-%d") if s.created_at else "",
        ]
        for s in snippets
    ]


def build_snippet_table(snippets: Sequence[SnippetView]) -> Table:
    """构建管理员视图的片段表格"""
    table = Table(title="全部片段（管理员视图）", show_header=True, header_style="bold cyan")
    for header in TABLE_HEADERS:
        table.add_column(header, style="green" if header == "Title" else None)

    for row in snippet_rows(snippets):
        table.add_row(*row)
    return table


async def list_snippets(session: AsyncSession) -> int:
    """列出全部片段（管理员视图）"""
    snippets = await SnippetService(session).list_all_for_admin()
    if not snippets:
        console.print("数据库中没有片段。")
        return 0

    console.print(build_snippet_table(snippets))
    return 0


async def delete_snippet(session: AsyncSession, snippet_id: int, assume_yes: bool = False) -> int:
    """删除片段，默认需要确认"""
    snippet = await SnippetRepository(session).get_by_id(snippet_id)
    if snippet is None:
        console.print(f"[red]片段不存在: ID {snippet_id}[/red]")
        return 1

    console.print(f'找到片段: "{escape(snippet.title)}" (ID: {snippet.id})')
    if not assume_yes and not Confirm.ask("确定要删除这个片段吗？", default=False, console=console):
        console.print("已取消删除。")
        return 0

    deleted = await SnippetService(session).remove_snippet(snippet_id, CliActor())
    if not deleted:
        console.print(f"[red]✗ 删除失败: ID {snippet_id}[/red]")
        return 1

    console.print(f'[green]✓ 片段 "{escape(snippet.title)}" (ID: {snippet_id}) 已删除[/green]')
    return 0


async def create_snippet(session: AsyncSession, args: argparse.Namespace) -> int:
    """从本地文件创建片段"""
    file_path = Path(args.file)
    try:
        code = file_path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"✗ 无法读取文件 '{escape(str(file_path))}': {escape(str(e))}")
        return 1

    title = args.title or infer_title_from_filename(file_path.name)
    if not title:
        console.print("✗ 无法从文件名生成标题，请使用 --title 指定")
        return 1

    username = args.user or settings.ADMIN_USERNAME
    if not username:
        console.print("✗ 请使用 --user 指定片段所有者，或配置 ADMIN_USERNAME")
        return 1

    try:
        owner = await UserService(session).get_by_username(username)
    except CatalogError as e:
        console.print(f"✗ {escape(e.message)}")
        return 1

    category_id = None
    if args.category:
        try:
            category = await CategoryService(session).lookup(args.category)
            category_id = category.id
            console.print(f'  找到分类: "{escape(category.name)}" (ID: {category_id})')
        except CatalogError:
            console.print(f'  ! 分类 "{escape(args.category)}" 不存在，片段将不设置分类')

    language_id = None
    language_name = args.language or language_for_extension(file_path.suffix)
    if language_name:
        try:
            language = await LanguageService(session).lookup(language_name)
            language_id = language.id
            console.print(f'  找到语言: "{escape(language.name)}" (ID: {language_id})')
        except CatalogError:
            console.print(f'  ! 语言 "{escape(language_name)}" 不存在，片段将不设置语言')

    snippet = await SnippetService(session).create_snippet(
        owner_id=owner.id,
        title=title,
        code=code,
        description=args.description or f"通过命令行从文件创建: {file_path.name}",
        tags=args.tags,
        category_id=category_id,
        language_id=language_id,
        reference_url=args.ref,
        is_private=args.private
    )
    console.print(f"✓ 片段创建成功: ID {snippet.id}, slug={snippet.slug}, short_id={snippet.short_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="代码片段管理工具")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="列出全部片段")

    delete_parser = subparsers.add_parser("delete", help="删除片段")
    delete_parser.add_argument("id", type=int, help="片段ID")
    delete_parser.add_argument("-y", "--yes", action="store_true", help="跳过确认")

    create_parser = subparsers.add_parser("create", help="从本地文件创建片段")
    create_parser.add_argument("file", help="代码文件路径")
    create_parser.add_argument("-u", "--user", help="所有者用户名，默认使用 ADMIN_USERNAME")
    create_parser.add_argument("-t", "--title", help="标题，默认由文件名生成")
    create_parser.add_argument("-d", "--description", help="描述")
    create_parser.add_argument("-c", "--category", help="分类名称")
    create_parser.add_argument("-l", "--language", help="语言名称，默认由扩展名推断")
    create_parser.add_argument("--tags", help='逗号分隔的标签，例如 "cli, script"')
    create_parser.add_argument("-r", "--ref", help="参考链接")
    create_parser.add_argument("-p", "--private", action="store_true", help="设为私有片段")
    return parser


async def run_command(session_factory: async_sessionmaker, args: argparse.Namespace) -> int:
    """在一个会话中执行命令，成功时提交"""
    async with session_factory() as session:
        try:
            if args.command == "list":
                exit_code = await list_snippets(session)
            elif args.command == "delete":
                exit_code = await delete_snippet(session, args.id, args.yes)
            else:
                exit_code = await create_snippet(session, args)
            await session.commit()
            return exit_code
        except CatalogError as e:
            await session.rollback()
            console.print(f"✗ 操作失败: {escape(e.message)}")
            return 1


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """主函数"""
    args = build_parser().parse_args(argv)

    engine = create_engine(settings)
    try:
        await init_db(engine)
        return await run_command(create_session_factory(engine), args)
    finally:
        # 清理数据库连接
        await cleanup_db(engine)


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
