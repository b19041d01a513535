"""
CategoryRepository - 分类Repository
"""
# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.category import Category
from storage.repositories.taxonomy_repository import TaxonomyRepository


class CategoryRepository(TaxonomyRepository[Category]):
    """分类Repository"""

    snippet_fk = "category_id"

    def __init__(self, session: AsyncSession):
        super().__init__(session, Category)
