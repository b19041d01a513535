"""
Storage层包
提供数据库连接、模型和Repository的统一访问接口
"""
# 项目内部导包
from .database import (
    get_session,
    init_db,
    cleanup_db,
    create_engine,
    create_session_factory,
    Base
)
from .models import (
    User,
    Category,
    Language,
    Snippet
)
from .repositories import (
    BaseRepository,
    SnippetRepository,
    SnippetView,
    Facet,
    CategoryRepository,
    LanguageRepository,
    UserRepository
)

__all__ = [
    # 数据库连接相关
    "get_session",
    "init_db",
    "cleanup_db",
    "create_engine",
    "create_session_factory",
    "Base",

    # 模型相关
    "User",
    "Category",
    "Language",
    "Snippet",

    # Repository相关
    "BaseRepository",
    "SnippetRepository",
    "SnippetView",
    "Facet",
    "CategoryRepository",
    "LanguageRepository",
    "UserRepository",
]
