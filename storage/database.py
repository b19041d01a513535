"""Database configuration module."""
# 标准库导包
import logging
from datetime import datetime, timezone
from typing import AsyncGenerator

# 第三方库导包
from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

# 项目内部导包
from config import Settings

# 配置日志
logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def utcnow() -> datetime:
    """当前UTC时间（不带时区信息，与DateTime列保持一致）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_database_url(settings: Settings) -> str:
    """构建数据库URL"""
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    # 从HOST中分离主机和端口
    host_port = settings.DB_HOST
    if ':' in host_port:
        host, port = host_port.split(':')
    else:
        host = host_port
        port = "3306"

    # 构建异步MySQL URL
    database_url = f"mysql+aiomysql://{settings.DB_USER}:{settings.DB_PASSWORD}@{host}:{port}/{settings.DB_NAME}"
    return database_url


def _on_sqlite_connect(dbapi_connection, connection_record):
    # 关闭驱动自带的隐式事务，由 _on_sqlite_begin 显式发出 BEGIN，SAVEPOINT 才能正常工作
    dbapi_connection.isolation_level = None
    # SQLite默认不执行外键约束，ON DELETE CASCADE / SET NULL 依赖此设置
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


def configure_sqlite(engine: AsyncEngine):
    """为SQLite引擎注册连接和事务事件"""
    event.listen(engine.sync_engine, "connect", _on_sqlite_connect)
    event.listen(engine.sync_engine, "begin", _on_sqlite_begin)


def create_engine(settings: Settings) -> AsyncEngine:
    """
    根据配置创建异步引擎

    引擎由应用根（lifespan或脚本入口）创建并持有，不作为模块级全局变量。

    Args:
        settings: 应用配置

    Returns:
        AsyncEngine: 异步引擎
    """
    database_url = get_database_url(settings)

    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=False)
        configure_sqlite(engine)
    else:
        engine = create_async_engine(
            database_url,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_CONNECTIONS - settings.DB_POOL_SIZE,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            echo=settings.DEBUG,  # 调试模式下显示SQL语句
            echo_pool=settings.DEBUG,  # 调试模式下显示连接池信息
        )

    masked_url = database_url
    if settings.DB_PASSWORD:
        masked_url = database_url.replace(settings.DB_PASSWORD, '***')
    logger.info(f"数据库连接URL: {masked_url}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """创建会话工厂"""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def init_db(engine: AsyncEngine):
    """初始化数据库，创建所有表"""
    # 确保所有模型已注册到 Base.metadata
    import storage.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        logger.info("数据库表初始化完成")


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话的异步生成器

    这是一个依赖注入函数，可以用于FastAPI的Depends。
    会话工厂由应用启动时放在 app.state 上。

    Yields:
        AsyncSession: 数据库会话对象
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"数据库会话发生错误: {str(e)}")
            await session.rollback()
            raise
        finally:
            await session.close()


async def cleanup_db(engine: AsyncEngine):
    """清理数据库连接"""
    await engine.dispose()
    logger.info("数据库连接已关闭")
