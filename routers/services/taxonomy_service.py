"""
分类 / 语言服务类
"""
# 标准库导包
import logging
from typing import List, Dict, Any

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from errors import NotFoundError
from storage.repositories.taxonomy_repository import TaxonomyRepository
from storage.repositories.category_repository import CategoryRepository
from storage.repositories.language_repository import LanguageRepository
from utils.slugify import slugify

# 配置日志
logger = logging.getLogger(__name__)


class TaxonomyService:
    """名称 + slug 形式的分类实体服务"""

    label = "分类"

    def __init__(self, repo: TaxonomyRepository):
        self.repo = repo

    async def list_all(self):
        return await self.repo.get_all_ordered()

    async def list_with_counts(self) -> List[Dict[str, Any]]:
        return await self.repo.get_all_with_count()

    async def get_by_slug(self, slug: str):
        item = await self.repo.get_by_slug(slug)
        if item is None:
            raise NotFoundError(f"{self.label}不存在: {slug}")
        return item

    async def lookup(self, identifier: str):
        """
        按名称或slug查找

        先按名称精确匹配，找不到再把名称转换为slug查找。

        Raises:
            NotFoundError: 两种方式都找不到
        """
        item = await self.repo.get_by_name(identifier)
        if item is None:
            item = await self.repo.get_by_slug(slugify(identifier))
        if item is None:
            raise NotFoundError(f"{self.label}不存在: {identifier}")
        return item

    async def create(self, name: str):
        item = await self.repo.create(name=name, slug=slugify(name))
        logger.info(f"创建{self.label}: id={item.id}, name={name}")
        return item

    async def rename(self, item_id: int, name: str):
        item = await self.repo.update_by_id(item_id, name=name, slug=slugify(name))
        if item is None:
            raise NotFoundError(f"{self.label}不存在: {item_id}")
        return item

    async def remove(self, item_id: int) -> bool:
        """删除记录，关联片段的外键被置空"""
        deleted = await self.repo.delete_by_id(item_id)
        if not deleted:
            raise NotFoundError(f"{self.label}不存在: {item_id}")
        logger.info(f"删除{self.label}: id={item_id}")
        return deleted


class CategoryService(TaxonomyService):
    """分类服务类"""

    label = "分类"

    def __init__(self, session: AsyncSession):
        super().__init__(CategoryRepository(session))


class LanguageService(TaxonomyService):
    """语言服务类"""

    label = "语言"

    def __init__(self, session: AsyncSession):
        super().__init__(LanguageRepository(session))
