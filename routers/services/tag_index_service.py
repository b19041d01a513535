"""
标签索引服务
从可见片段的标签字符串中统计标签使用次数
"""
# 标准库导包
import logging
from dataclasses import dataclass
from typing import Dict, List, Iterable

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.repositories.snippet_repository import SnippetRepository

# 配置日志
logger = logging.getLogger(__name__)


@dataclass
class TagCount:
    """标签及其使用次数"""
    name: str
    count: int


def split_tags(raw_tags: str) -> List[str]:
    """按逗号拆分标签字符串，去掉空白和空标签"""
    return [tag.strip() for tag in (raw_tags or "").split(",") if tag.strip()]


def count_tags(tag_strings: Iterable[str]) -> List[TagCount]:
    """
    统计标签出现次数

    同一片段内重复的标签分别计数。

    Args:
        tag_strings: 标签字符串序列

    Returns:
        按标签名排序的 TagCount 列表
    """
    tag_counts: Dict[str, int] = {}
    for raw_tags in tag_strings:
        for tag in split_tags(raw_tags):
            tag_counts[tag] = tag_counts.get(tag, 0) + 1

    return [TagCount(name=name, count=tag_counts[name]) for name in sorted(tag_counts)]


class TagIndexService:
    """标签索引服务类"""

    def __init__(self, session: AsyncSession):
        self.snippet_repo = SnippetRepository(session)

    async def build_tag_index(self) -> List[TagCount]:
        """
        构建标签索引

        每次调用都重新计算，不做缓存。

        Returns:
            按标签名排序的 TagCount 列表
        """
        tag_strings = await self.snippet_repo.get_visible_tag_strings()
        index = count_tags(tag_strings)
        logger.debug(f"标签索引构建完成: {len(tag_strings)}个片段, {len(index)}个标签")
        return index
