"""
标识分配服务
为片段生成唯一的slug和short_id
"""
# 标准库导包
import logging
import string
import time
from typing import Optional

# 第三方库导包
from nanoid import generate
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import settings
from storage.models.snippet import Snippet
from storage.repositories.snippet_repository import SnippetRepository
from utils.slugify import slugify

# 配置日志
logger = logging.getLogger(__name__)

SHORT_ID_ALPHABET = string.ascii_letters + string.digits
RETRY_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits

# 与 /snippets 下的固定路由同名，作为slug会被路由遮蔽
RESERVED_SLUGS = frozenset({"recent", "tags", "categories", "languages", "search"})


def current_millis() -> int:
    """当前Unix时间戳（毫秒）"""
    return int(time.time() * 1000)


class IdentityAllocator:
    """片段标识分配器"""

    def __init__(self, session: AsyncSession, short_id_length: Optional[int] = None):
        """
        初始化标识分配器

        Args:
            session: 数据库会话
            short_id_length: short_id长度，默认使用 settings.SHORT_ID_LENGTH
        """
        self.snippet_repo = SnippetRepository(session)
        self.short_id_length = short_id_length or settings.SHORT_ID_LENGTH

    def generate_short_id(self) -> str:
        """生成固定长度的随机字母数字short_id"""
        return generate(SHORT_ID_ALPHABET, self.short_id_length)

    @staticmethod
    def disambiguate(candidate: str) -> str:
        """在slug后追加毫秒时间戳"""
        return f"{candidate}-{current_millis()}"

    @staticmethod
    def retry_candidate(candidate: str) -> str:
        """
        插入冲突后重试使用的slug

        时间戳加随机后缀，避免同一毫秒内再次得到相同的候选。
        """
        return f"{candidate}-{current_millis()}-{generate(RETRY_SUFFIX_ALPHABET, 6)}"

    async def allocate_slug(self, title: str, current: Optional[Snippet] = None) -> str:
        """
        为标题分配唯一slug

        创建时总是根据标题生成；更新时只有标题变化才重新生成，否则保留原slug。
        候选slug已被其他片段占用或是保留字时追加毫秒时间戳，不再二次检查，
        最终由数据库唯一索引兜底。

        Args:
            title: 片段标题
            current: 更新时的当前片段，创建时为None

        Returns:
            slug
        """
        if current is not None and title == current.title:
            return current.slug

        candidate = slugify(title)
        exclude_id = current.id if current is not None else None

        if candidate in RESERVED_SLUGS:
            disambiguated = self.disambiguate(candidate)
            logger.info(f"slug为保留字: {candidate}，改用 {disambiguated}")
            return disambiguated

        if await self.snippet_repo.slug_exists(candidate, exclude_id=exclude_id):
            disambiguated = self.disambiguate(candidate)
            logger.info(f"slug已存在: {candidate}，改用 {disambiguated}")
            return disambiguated

        return candidate
