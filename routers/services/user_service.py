"""
用户服务类
处理用户注册、审核、API密钥等业务逻辑
"""
# 标准库导包
import logging
from typing import Optional, List

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from errors import AuthorizationDeniedError, ConflictError, NotFoundError
from storage.models.user import User
from storage.repositories.user_repository import UserRepository
from utils.security import hash_password, verify_password, generate_api_key

# 配置日志
logger = logging.getLogger(__name__)


class UserService:
    """用户服务类"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)

    async def register(self, username: str, email: str, password: str) -> User:
        """
        公开注册，新用户默认未审核、非管理员

        Raises:
            ConflictError: 用户名或邮箱已存在
        """
        user = await self.user_repo.create(
            username=username,
            email=email,
            password_hash=hash_password(password),
            api_key=generate_api_key(),
            is_admin=False,
            is_approved=False
        )
        logger.info(f"用户注册成功: id={user.id}, username={username}")
        return user

    async def create_by_admin(
        self,
        username: str,
        email: str,
        password: str,
        is_admin: bool = False
    ) -> User:
        """管理员创建用户，直接审核通过"""
        user = await self.user_repo.create(
            username=username,
            email=email,
            password_hash=hash_password(password),
            api_key=generate_api_key(),
            is_admin=bool(is_admin),
            is_approved=True
        )
        logger.info(f"管理员创建用户: id={user.id}, username={username}, is_admin={user.is_admin}")
        return user

    async def get_by_username(self, username: str) -> User:
        user = await self.user_repo.get_by_username(username)
        if user is None:
            raise NotFoundError(f"用户不存在: {username}")
        return user

    async def get_by_id(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"用户不存在: {user_id}")
        return user

    async def authenticate_api_key(self, api_key: str) -> Optional[User]:
        """根据API密钥查找已审核用户"""
        if not api_key:
            return None
        return await self.user_repo.get_by_api_key(api_key)

    async def list_users(self) -> List[User]:
        return await self.user_repo.get_all_newest_first()

    async def set_approval(self, user_id: int, is_approved: bool) -> User:
        user = await self.user_repo.update_by_id(user_id, is_approved=bool(is_approved))
        if user is None:
            raise NotFoundError(f"用户不存在: {user_id}")
        logger.info(f"用户审核状态变更: id={user_id}, is_approved={user.is_approved}")
        return user

    async def update_email(self, user_id: int, email: str) -> User:
        """
        修改邮箱

        Raises:
            ConflictError: 邮箱已被其他用户使用
        """
        if await self.user_repo.email_taken(email, exclude_id=user_id):
            raise ConflictError("邮箱已被其他用户使用")
        user = await self.user_repo.update_by_id(user_id, email=email)
        if user is None:
            raise NotFoundError(f"用户不存在: {user_id}")
        return user

    async def update_password(self, user_id: int, password: str) -> User:
        user = await self.user_repo.update_by_id(user_id, password_hash=hash_password(password))
        if user is None:
            raise NotFoundError(f"用户不存在: {user_id}")
        return user

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> User:
        """
        校验当前密码后修改密码

        Raises:
            AuthorizationDeniedError: 当前密码不正确
        """
        user = await self.get_by_id(user_id)
        if not verify_password(current_password, user.password_hash):
            raise AuthorizationDeniedError("当前密码不正确")
        user = await self.update_password(user_id, new_password)
        logger.info(f"用户密码已修改: id={user_id}")
        return user

    async def regenerate_api_key(self, user_id: int) -> str:
        api_key = generate_api_key()
        user = await self.user_repo.update_by_id(user_id, api_key=api_key)
        if user is None:
            raise NotFoundError(f"用户不存在: {user_id}")
        logger.info(f"API密钥已重新生成: user_id={user_id}")
        return api_key

    async def delete_user(self, user_id: int) -> bool:
        """删除用户，其片段由外键级联删除"""
        deleted = await self.user_repo.delete_by_id(user_id)
        logger.info(f"删除用户: id={user_id}, deleted={deleted}")
        return deleted
