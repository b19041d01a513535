"""
TaxonomyRepository - 分类 / 语言的公共Repository
"""
# 标准库导包
from typing import Optional, List, Dict, Any

# 第三方库导包
from sqlalchemy import select, func

# 项目内部导包
from storage.models.snippet import Snippet
from storage.models.user import User
from storage.policies import visible_condition
from storage.repositories.base import BaseRepository, ModelType


class TaxonomyRepository(BaseRepository[ModelType]):
    """名称 + slug 形式的分类实体Repository"""

    # Snippet上指向该实体的外键列名
    snippet_fk: str = ""

    async def get_all_ordered(self) -> List[ModelType]:
        """按名称排序获取全部记录"""
        return await self.query_by_filters(filters={}, order_by="name", order_desc=False)

    async def get_by_slug(self, slug: str) -> Optional[ModelType]:
        results = await self.query_by_filters(filters={"slug": slug}, limit=1)
        return results[0] if results else None

    async def get_by_name(self, name: str) -> Optional[ModelType]:
        results = await self.query_by_filters(filters={"name": name}, limit=1)
        return results[0] if results else None

    async def get_all_with_count(self) -> List[Dict[str, Any]]:
        """
        获取至少包含一个可见片段的记录及片段数量

        Returns:
            列表，每个元素包含 id, name, slug, count，按名称排序
        """
        fk_column = getattr(Snippet, self.snippet_fk)
        snippet_count = func.count(Snippet.id).label("count")
        query = (
            select(self.model.id, self.model.name, self.model.slug, snippet_count)
            .join(Snippet, fk_column == self.model.id)
            .join(User, Snippet.user_id == User.id)
            .where(visible_condition())
            .group_by(self.model.id, self.model.name, self.model.slug)
            .having(func.count(Snippet.id) > 0)
            .order_by(self.model.name)
        )
        result = await self.session.execute(query)
        return [dict(row._mapping) for row in result.all()]
