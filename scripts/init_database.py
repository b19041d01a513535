"""
初始化数据库的脚本

创建所有表，按配置创建初始管理员，并根据语言扩展名映射写入语言表
"""
# 标准库导包
import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import Settings, settings
from storage import create_engine, create_session_factory, init_db, cleanup_db
from storage.repositories import (
    CategoryRepository,
    LanguageRepository,
    SnippetRepository,
    UserRepository
)
from routers.services.user_service import UserService
from utils.language_map import LANGUAGE_EXTENSION_MAP

# 配置日志
logger = logging.getLogger(__name__)


async def seed_admin(session: AsyncSession, app_settings: Settings) -> bool:
    """
    创建初始管理员

    已存在管理员或配置不完整时跳过

    Returns:
        是否创建了管理员
    """
    user_repo = UserRepository(session)
    if await user_repo.count_admins() > 0:
        print("  - 已存在管理员，跳过")
        return False

    if not (app_settings.ADMIN_USERNAME and app_settings.ADMIN_PASSWORD and app_settings.ADMIN_EMAIL):
        print("  - 未配置 ADMIN_USERNAME / ADMIN_PASSWORD / ADMIN_EMAIL，跳过创建管理员")
        return False

    admin = await UserService(session).create_by_admin(
        username=app_settings.ADMIN_USERNAME,
        email=app_settings.ADMIN_EMAIL,
        password=app_settings.ADMIN_PASSWORD,
        is_admin=True
    )
    print(f"  ✓ 创建管理员: {admin.username} (ID: {admin.id})")
    return True


async def seed_languages(session: AsyncSession) -> int:
    """
    根据扩展名映射写入语言，已存在的slug跳过

    Returns:
        新建的语言数量
    """
    language_repo = LanguageRepository(session)
    existing = set(await language_repo.get_all_slugs())

    created_count = 0
    for slug in LANGUAGE_EXTENSION_MAP:
        if slug in existing:
            continue
        await language_repo.create(name=slug.capitalize(), slug=slug)
        created_count += 1

    print(f"  ✓ 新建 {created_count} 种语言，跳过 {len(existing)} 种已存在的语言")
    return created_count


async def summarize(session: AsyncSession) -> Dict[str, int]:
    """统计各表的行数"""
    summary = {
        "users": await UserRepository(session).count(),
        "categories": await CategoryRepository(session).count(),
        "languages": await LanguageRepository(session).count(),
        "snippets": await SnippetRepository(session).count(),
    }
    logger.info(f"数据库概况: {summary}")
    return summary


async def init_database(app_settings: Settings = settings) -> int:
    """初始化数据库"""
    print("开始初始化数据库...")

    engine = create_engine(app_settings)
    session_factory = create_session_factory(engine)
    try:
        await init_db(engine)
        print("  ✓ 数据库表已创建")

        async with session_factory() as session:
            try:
                await seed_admin(session, app_settings)
                await seed_languages(session)
                await session.commit()

                summary = await summarize(session)
            except Exception as e:
                await session.rollback()
                print(f"✗ 初始化失败: {str(e)}")
                import traceback
                traceback.print_exc()
                return 1

        print("\n完成！" + "，".join(f"{name}: {count}" for name, count in summary.items()))
        return 0
    finally:
        # 清理数据库连接
        await cleanup_db(engine)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    exit_code = asyncio.run(init_database())
    sys.exit(exit_code)
