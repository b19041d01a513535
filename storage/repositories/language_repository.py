"""
LanguageRepository - 编程语言Repository
"""
# 标准库导包
from typing import List

# 第三方库导包
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.language import Language
from storage.repositories.taxonomy_repository import TaxonomyRepository


class LanguageRepository(TaxonomyRepository[Language]):
    """编程语言Repository"""

    snippet_fk = "language_id"

    def __init__(self, session: AsyncSession):
        super().__init__(session, Language)

    async def get_all_slugs(self) -> List[str]:
        result = await self.session.execute(select(Language.slug))
        return [row[0] for row in result.all()]
