"""
基础API路由
包含根路径、健康检查等基础功能
"""
# 标准库导包
import logging

# 第三方库导包
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import settings
from storage.database import get_session

# 配置日志
logger = logging.getLogger(__name__)

# 创建路由器
router = APIRouter(
    tags=["基础功能"]
)


@router.get("/", summary="服务欢迎信息")
async def root():
    """
    根路径接口

    Returns:
        服务名称和版本
    """
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@router.get("/health", summary="健康检查")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    健康检查接口

    执行一次简单查询确认数据库可用

    Returns:
        服务健康状态信息
    """
    database = "ok"
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"数据库健康检查失败: {str(e)}")
        database = "error"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "service": settings.APP_NAME,
        "checks": {
            "api": "ok",
            "database": database
        }
    }
