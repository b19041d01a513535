"""
UserRepository - 用户Repository
"""
# 标准库导包
from typing import Optional, List

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.user import User
from storage.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """用户Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_username(self, username: str) -> Optional[User]:
        results = await self.query_by_filters(filters={"username": username}, limit=1)
        return results[0] if results else None

    async def get_by_api_key(self, api_key: str) -> Optional[User]:
        """
        根据API密钥获取用户，只返回已审核的用户

        Args:
            api_key: API密钥

        Returns:
            用户实例或None
        """
        results = await self.query_by_filters(
            filters={"api_key": api_key, "is_approved": True},
            limit=1
        )
        return results[0] if results else None

    async def get_all_newest_first(self) -> List[User]:
        return await self.query_by_filters(filters={}, order_by="created_at", order_desc=True)

    async def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        return await self.exists(exclude_id=exclude_id, email=email)

    async def count_admins(self) -> int:
        return await self.count(is_admin=True)
