"""
SnippetRepository - 代码片段Repository

分面查询：各分面（全部 / 分类 / 语言 / 作者 / 标签 / 搜索 / 所有者）共用同一个投影、
同一个可见性条件、同一个排序和同一个分页公式。每个分面都提供 count 和 page
两个方法，两者使用完全相同的WHERE条件。
"""
# 标准库导包
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Any, Tuple

# 第三方库导包
from sqlalchemy import select, update, delete, and_, or_, func, case
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.snippet import Snippet
from storage.models.category import Category
from storage.models.language import Language
from storage.models.user import User
from storage.policies import Actor, OwnershipGuard, visible_condition, readable_condition
from storage.repositories.base import BaseRepository

LIKE_ESCAPE = "/"


class Facet(str, enum.Enum):
    """片段列表的分面"""
    ALL = "all"
    CATEGORY = "category"
    LANGUAGE = "language"
    AUTHOR = "author"
    TAG = "tag"
    SEARCH = "search"
    OWNER = "owner"


@dataclass
class SnippetView:
    """片段列表与详情的投影"""
    id: int
    title: str
    slug: str
    short_id: str
    description: Optional[str]
    code: str
    tags: Optional[str]
    reference_url: Optional[str]
    is_private: bool
    created_at: datetime
    user_id: int
    category_id: Optional[int]
    language_id: Optional[int]
    category_name: Optional[str]
    category_slug: Optional[str]
    language_name: Optional[str]
    language_slug: Optional[str]
    author_name: Optional[str]


def page_window(page: int, page_size: int) -> Tuple[int, int]:
    """
    计算分页的 (offset, limit)

    页码小于1按1处理，页码没有上限，超出最后一页时查询结果为空。
    """
    page = max(int(page), 1)
    page_size = max(int(page_size), 1)
    return (page - 1) * page_size, page_size


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def contains(column, term: str):
    """字面子串匹配（不区分大小写，% 和 _ 按普通字符处理）"""
    return column.ilike(f"%{_escape_like(term)}%", escape=LIKE_ESCAPE)


class SnippetRepository(BaseRepository[Snippet]):
    """代码片段Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Snippet)

    # ========== 投影与条件 ==========

    @staticmethod
    def _projection():
        """基础投影：片段字段 + 分类、语言名称与slug + 作者用户名"""
        return (
            select(
                Snippet.id,
                Snippet.title,
                Snippet.slug,
                Snippet.short_id,
                Snippet.description,
                Snippet.code,
                Snippet.tags,
                Snippet.reference_url,
                Snippet.is_private,
                Snippet.created_at,
                Snippet.user_id,
                Snippet.category_id,
                Snippet.language_id,
                Category.name.label("category_name"),
                Category.slug.label("category_slug"),
                Language.name.label("language_name"),
                Language.slug.label("language_slug"),
                User.username.label("author_name"),
            )
            .select_from(Snippet)
            .join(User, Snippet.user_id == User.id)
            .outerjoin(Category, Snippet.category_id == Category.id)
            .outerjoin(Language, Snippet.language_id == Language.id)
        )

    @staticmethod
    def _ordered(query):
        # 按创建时间倒序，同一时间按ID倒序
        return query.order_by(Snippet.created_at.desc(), Snippet.id.desc())

    @staticmethod
    def facet_condition(facet: Facet, value: Any = None):
        """
        构建分面条件

        标签分面在原始标签字符串中做子串匹配（不按逗号拆分），
        因此 "java" 也会匹配 "javascript"。

        Returns:
            SQL条件，ALL分面返回None
        """
        if facet is Facet.ALL:
            return None
        if facet is Facet.CATEGORY:
            return Snippet.category_id == value
        if facet is Facet.LANGUAGE:
            return Snippet.language_id == value
        if facet is Facet.AUTHOR:
            return User.username == value
        if facet is Facet.OWNER:
            return Snippet.user_id == value
        if facet is Facet.TAG:
            return contains(Snippet.tags, value)
        if facet is Facet.SEARCH:
            return or_(
                contains(Snippet.title, value),
                contains(Snippet.description, value),
                contains(Snippet.code, value),
            )
        raise ValueError(f"未知的分面: {facet}")

    def _visible_where(self, facet: Facet, value: Any):
        conditions = [visible_condition()]
        facet_cond = self.facet_condition(facet, value)
        if facet_cond is not None:
            conditions.append(facet_cond)
        return and_(*conditions)

    @staticmethod
    def _to_views(rows) -> List[SnippetView]:
        return [SnippetView(**row._mapping) for row in rows]

    # ========== 分面查询 ==========

    async def count_facet(self, facet: Facet, value: Any = None) -> int:
        """
        统计分面下的可见片段数量

        Args:
            facet: 分面
            value: 分面值（分类ID、语言ID、用户名、标签子串、搜索词、用户ID）

        Returns:
            片段数量
        """
        query = (
            select(func.count(Snippet.id))
            .select_from(Snippet)
            .join(User, Snippet.user_id == User.id)
            .where(self._visible_where(facet, value))
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def page_facet(
        self,
        facet: Facet,
        value: Any,
        page: int,
        page_size: int
    ) -> List[SnippetView]:
        """
        获取分面下的一页可见片段

        Args:
            facet: 分面
            value: 分面值
            page: 页码（从1开始）
            page_size: 每页数量

        Returns:
            片段投影列表，最多 page_size 条
        """
        offset, limit = page_window(page, page_size)
        query = self._ordered(
            self._projection().where(self._visible_where(facet, value))
        ).offset(offset).limit(limit)

        result = await self.session.execute(query)
        return self._to_views(result.all())

    async def count_all(self) -> int:
        return await self.count_facet(Facet.ALL)

    async def page_all(self, page: int, page_size: int) -> List[SnippetView]:
        return await self.page_facet(Facet.ALL, None, page, page_size)

    async def count_by_category(self, category_id: int) -> int:
        return await self.count_facet(Facet.CATEGORY, category_id)

    async def page_by_category(self, category_id: int, page: int, page_size: int) -> List[SnippetView]:
        return await self.page_facet(Facet.CATEGORY, category_id, page, page_size)

    async def count_by_language(self, language_id: int) -> int:
        return await self.count_facet(Facet.LANGUAGE, language_id)

    async def page_by_language(self, language_id: int, page: int, page_size: int) -> List[SnippetView]:
        return await self.page_facet(Facet.LANGUAGE, language_id, page, page_size)

    async def count_by_author(self, username: str) -> int:
        return await self.count_facet(Facet.AUTHOR, username)

    async def page_by_author(self, username: str, page: int, page_size: int) -> List[SnippetView]:
        return await self.page_facet(Facet.AUTHOR, username, page, page_size)

    async def count_by_owner(self, user_id: int) -> int:
        return await self.count_facet(Facet.OWNER, user_id)

    async def page_by_owner(self, user_id: int, page: int, page_size: int) -> List[SnippetView]:
        return await self.page_facet(Facet.OWNER, user_id, page, page_size)

    async def count_by_tag(self, tag: str) -> int:
        return await self.count_facet(Facet.TAG, tag)

    async def page_by_tag(self, tag: str, page: int, page_size: int) -> List[SnippetView]:
        return await self.page_facet(Facet.TAG, tag, page, page_size)

    async def count_search(self, term: str) -> int:
        return await self.count_facet(Facet.SEARCH, term)

    async def page_search(self, term: str, page: int, page_size: int) -> List[SnippetView]:
        return await self.page_facet(Facet.SEARCH, term, page, page_size)

    # ========== 其他读取 ==========

    async def find_by_identifier(
        self,
        identifier: str,
        viewer: Optional[Actor] = None
    ) -> Optional[SnippetView]:
        """
        根据slug或short_id查找片段

        Args:
            identifier: slug或short_id
            viewer: 当前用户，本人和管理员可以看到私有片段

        Returns:
            片段投影或None
        """
        query = self._projection().where(
            and_(
                or_(Snippet.slug == identifier, Snippet.short_id == identifier),
                readable_condition(viewer),
            )
        ).order_by(
            # slug 与另一条片段的 short_id 相同时优先返回 slug 匹配
            case((Snippet.slug == identifier, 0), else_=1)
        ).limit(1)
        result = await self.session.execute(query)
        rows = self._to_views(result.all())
        return rows[0] if rows else None

    async def find_recent(self, limit: int = 5) -> List[SnippetView]:
        """最新的可见片段"""
        query = self._ordered(
            self._projection().where(visible_condition())
        ).limit(limit)
        result = await self.session.execute(query)
        return self._to_views(result.all())

    async def list_for_owner(self, user_id: int) -> List[SnippetView]:
        """用户自己的全部片段（包括私有片段），不应用可见性条件"""
        query = self._ordered(
            self._projection().where(Snippet.user_id == user_id)
        )
        result = await self.session.execute(query)
        return self._to_views(result.all())

    async def list_all_for_admin(self) -> List[SnippetView]:
        """管理后台的全部片段，不应用可见性条件"""
        result = await self.session.execute(self._ordered(self._projection()))
        return self._to_views(result.all())

    async def get_visible_tag_strings(self) -> List[str]:
        """所有可见片段的非空标签字符串"""
        query = (
            select(Snippet.tags)
            .select_from(Snippet)
            .join(User, Snippet.user_id == User.id)
            .where(
                and_(
                    visible_condition(),
                    Snippet.tags.isnot(None),
                    Snippet.tags != "",
                )
            )
        )
        result = await self.session.execute(query)
        return [row[0] for row in result.all()]

    async def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        return await self.exists(exclude_id=exclude_id, slug=slug)

    # ========== 受所有权约束的写入 ==========

    async def update_scoped(self, snippet_id: int, actor: Actor, **values) -> int:
        """
        更新片段，非管理员的UPDATE语句附带 user_id 条件

        Returns:
            受影响的行数，0表示不存在或无权修改
        """
        statement = OwnershipGuard.scope(
            update(Snippet).where(Snippet.id == snippet_id).values(**values), actor
        )
        return await self.execute_write(statement)

    async def delete_scoped(self, snippet_id: int, actor: Actor) -> int:
        """
        删除片段，非管理员的DELETE语句附带 user_id 条件

        Returns:
            删除的行数，0表示不存在或无权删除
        """
        statement = OwnershipGuard.scope(delete(Snippet).where(Snippet.id == snippet_id), actor)
        return await self.execute_write(statement)
