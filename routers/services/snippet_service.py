"""
片段服务类
处理片段的分面查询、创建、更新、删除等业务逻辑
"""
# 标准库导包
import logging
from typing import Optional, List, Tuple, Any

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import settings
from errors import AuthorizationDeniedError, ConflictError, NotFoundError
from storage.models.snippet import Snippet
from storage.policies import Actor, OwnershipGuard
from storage.repositories.snippet_repository import SnippetRepository, SnippetView, Facet
from routers.services.identity_allocator import IdentityAllocator
from routers.services.tag_index_service import TagIndexService, TagCount
from utils.slugify import slugify

# 配置日志
logger = logging.getLogger(__name__)


class SnippetService:
    """片段服务类"""

    def __init__(self, session: AsyncSession):
        """
        初始化片段服务

        Args:
            session: 数据库会话
        """
        self.session = session
        self.snippet_repo = SnippetRepository(session)
        self.allocator = IdentityAllocator(session)
        self.tag_index = TagIndexService(session)

    # ========== 读取 ==========

    async def list_page(
        self,
        facet: Facet,
        value: Any,
        page: int,
        page_size: int
    ) -> Tuple[List[SnippetView], int]:
        """
        获取分面下的一页片段和总数

        Args:
            facet: 分面
            value: 分面值
            page: 页码
            page_size: 每页数量

        Returns:
            (片段列表, 总数)
        """
        total = await self.snippet_repo.count_facet(facet, value)
        items = await self.snippet_repo.page_facet(facet, value, page, page_size)
        return items, total

    async def get_by_identifier(self, identifier: str, viewer: Optional[Actor] = None) -> SnippetView:
        """
        根据slug或short_id获取片段详情

        Raises:
            NotFoundError: 片段不存在或对当前用户不可见
        """
        snippet = await self.snippet_repo.find_by_identifier(identifier, viewer)
        if snippet is None:
            raise NotFoundError(f"片段不存在: {identifier}")
        return snippet

    async def list_recent(self, limit: Optional[int] = None) -> List[SnippetView]:
        return await self.snippet_repo.find_recent(limit or settings.RECENT_SNIPPETS_LIMIT)

    async def list_for_owner(self, user_id: int) -> List[SnippetView]:
        return await self.snippet_repo.list_for_owner(user_id)

    async def list_all_for_admin(self) -> List[SnippetView]:
        return await self.snippet_repo.list_all_for_admin()

    async def list_dashboard(self, actor: Actor) -> List[SnippetView]:
        """管理面板列表：管理员看到全部片段，普通用户只看到自己的片段"""
        if actor.is_admin:
            return await self.list_all_for_admin()
        return await self.list_for_owner(actor.id)

    async def get_for_edit(self, snippet_id: int, actor: Actor) -> Snippet:
        """
        获取待编辑的片段

        编辑表单场景下区分"不存在"和"无权修改"。

        Raises:
            NotFoundError: 片段不存在
            AuthorizationDeniedError: 片段存在但不属于当前用户
        """
        snippet = await self.snippet_repo.get_by_id(snippet_id)
        if snippet is None:
            raise NotFoundError(f"片段不存在: {snippet_id}")
        if not OwnershipGuard.authorize_mutation(snippet, actor):
            raise AuthorizationDeniedError("只能编辑自己的片段")
        return snippet

    async def build_tag_index(self) -> List[TagCount]:
        return await self.tag_index.build_tag_index()

    # ========== 写入 ==========

    async def create_snippet(
        self,
        owner_id: int,
        title: str,
        code: str,
        description: Optional[str] = None,
        tags: Optional[str] = None,
        category_id: Optional[int] = None,
        language_id: Optional[int] = None,
        reference_url: Optional[str] = None,
        is_private: bool = False
    ) -> Snippet:
        """
        创建片段，分配slug和short_id

        slug插入冲突（并发创建同名片段）时换新的候选有限次重试；
        short_id冲突不重试，直接作为ConflictError抛出。

        Args:
            owner_id: 所有者用户ID
            title: 标题
            code: 代码
            description: 描述
            tags: 逗号分隔的标签
            category_id: 分类ID
            language_id: 语言ID
            reference_url: 参考链接
            is_private: 是否私有

        Returns:
            创建的Snippet实例

        Raises:
            ConflictError: 唯一性约束冲突且无法通过更换slug解决
        """
        short_id = self.allocator.generate_short_id()
        slug = await self.allocator.allocate_slug(title)

        max_retries = settings.SLUG_MAX_RETRIES
        for attempt in range(max_retries + 1):
            try:
                snippet = await self.snippet_repo.create(
                    title=title,
                    slug=slug,
                    short_id=short_id,
                    description=description,
                    code=code,
                    tags=tags,
                    category_id=category_id or None,
                    language_id=language_id or None,
                    reference_url=reference_url,
                    user_id=owner_id,
                    is_private=bool(is_private)
                )
                break
            except ConflictError:
                if attempt >= max_retries or not await self.snippet_repo.slug_exists(slug):
                    raise
                slug = self.allocator.retry_candidate(slugify(title))
                logger.warning(f"slug插入冲突，第{attempt + 1}次重试: {slug}")

        logger.info(f"创建片段成功: id={snippet.id}, slug={snippet.slug}, short_id={snippet.short_id}, user_id={owner_id}")
        return snippet

    async def update_snippet(
        self,
        snippet_id: int,
        actor: Actor,
        title: str,
        code: str,
        description: Optional[str] = None,
        tags: Optional[str] = None,
        category_id: Optional[int] = None,
        language_id: Optional[int] = None,
        reference_url: Optional[str] = None,
        is_private: bool = False
    ) -> Optional[Snippet]:
        """
        更新片段

        标题不变时保留原slug。short_id和创建时间不会被修改。
        非管理员的UPDATE语句带有 user_id 条件，不存在和无权修改都返回None，
        调用方不区分这两种情况。

        Returns:
            更新后的Snippet实例，不存在或无权修改时返回None
        """
        current = await self.snippet_repo.get_by_id(snippet_id)
        if current is None or not OwnershipGuard.authorize_mutation(current, actor):
            logger.info(f"片段更新未执行: id={snippet_id}, actor={actor.id}")
            return None

        slug = await self.allocator.allocate_slug(title, current)
        values = {
            "title": title,
            "description": description,
            "code": code,
            "tags": tags,
            "category_id": category_id or None,
            "language_id": language_id or None,
            "reference_url": reference_url,
            "is_private": bool(is_private),
        }

        max_retries = settings.SLUG_MAX_RETRIES
        for attempt in range(max_retries + 1):
            try:
                affected = await self.snippet_repo.update_scoped(snippet_id, actor, slug=slug, **values)
                break
            except ConflictError:
                slug_conflict = slug != current.slug and await self.snippet_repo.slug_exists(
                    slug, exclude_id=snippet_id
                )
                if attempt >= max_retries or not slug_conflict:
                    raise
                slug = self.allocator.retry_candidate(slugify(title))
                logger.warning(f"slug更新冲突，第{attempt + 1}次重试: {slug}")

        if not affected:
            logger.info(f"片段更新未影响任何行: id={snippet_id}, actor={actor.id}")
            return None

        await self.session.refresh(current)
        logger.info(f"更新片段成功: id={snippet_id}, slug={current.slug}")
        return current

    async def remove_snippet(self, snippet_id: int, actor: Actor) -> int:
        """
        删除片段

        Returns:
            删除的行数，0表示不存在或无权删除
        """
        deleted = await self.snippet_repo.delete_scoped(snippet_id, actor)
        logger.info(f"删除片段: id={snippet_id}, actor={actor.id}, deleted={deleted}")
        return deleted
