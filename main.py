"""
Snippet Catalog 主应用程序

基于FastAPI和Uvicorn的代码片段目录服务
"""
# 标准库导包
import logging
from contextlib import asynccontextmanager
from typing import Optional

# 第三方库导包
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# 项目内部导包
from config import Settings, settings
from storage.database import create_engine, create_session_factory, init_db, cleanup_db
from routers import basic, snippets, api, admin

# 配置日志
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用程序生命周期管理

    引擎和会话工厂在启动时创建并挂在 app.state 上，关闭时释放
    """
    app_settings: Settings = app.state.settings
    engine = create_engine(app_settings)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    try:
        await init_db(engine)
        logger.info("应用程序启动完成")
        yield
    except Exception as e:
        logger.error(f"应用程序启动失败: {str(e)}")
        raise
    finally:
        # 关闭时清理数据库连接
        try:
            await cleanup_db(engine)
            logger.info("应用程序关闭完成")
        except Exception as e:
            logger.error(f"应用程序关闭时发生错误: {str(e)}")


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    创建FastAPI应用实例

    Args:
        app_settings: 应用配置，默认使用全局配置

    Returns:
        FastAPI: 应用实例
    """
    app_settings = app_settings or settings
    application = FastAPI(
        title=app_settings.APP_NAME,
        description="代码片段目录服务",
        version=app_settings.APP_VERSION,
        docs_url=app_settings.DOCS_URL,
        redoc_url=app_settings.REDOC_URL,
        openapi_url=app_settings.OPENAPI_URL,
        lifespan=lifespan
    )
    application.state.settings = app_settings

    # 添加CORS中间件
    application.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=app_settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=app_settings.CORS_ALLOW_METHODS,
        allow_headers=app_settings.CORS_ALLOW_HEADERS,
    )

    # 注册路由
    application.include_router(basic.router)
    application.include_router(snippets.router)
    application.include_router(api.router)
    application.include_router(admin.router)
    return application


# 创建FastAPI应用实例
app = create_app()


def main():
    """
    应用程序入口点
    """
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL,
        workers=settings.WORKERS
    )


if __name__ == "__main__":
    main()
