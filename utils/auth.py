"""
认证工具
通过 X-API-Key 请求头识别当前用户
"""
# 标准库导包
from typing import Optional

# 第三方库导包
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.database import get_session
from storage.models.user import User
from routers.services.user_service import UserService


async def get_optional_user(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    session: AsyncSession = Depends(get_session)
) -> Optional[User]:
    """
    获取当前用户（可选）

    没有API密钥或密钥无效时返回None，按匿名访问处理。

    Args:
        x_api_key: X-API-Key header值
        session: 数据库会话

    Returns:
        User对象或None
    """
    if not x_api_key:
        return None
    return await UserService(session).authenticate_api_key(x_api_key)


async def get_current_user(
    user: Optional[User] = Depends(get_optional_user)
) -> User:
    """
    获取当前用户（必需）

    Raises:
        HTTPException: 401，缺少或无效的API密钥
    """
    if user is None:
        raise HTTPException(status_code=401, detail="缺少或无效的API密钥")
    return user


async def require_admin(
    user: User = Depends(get_current_user)
) -> User:
    """
    要求当前用户为管理员

    Raises:
        HTTPException: 403，非管理员
    """
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="需要管理员权限")
    return user
