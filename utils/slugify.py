"""
Slug工具
"""
# 标准库导包
import re

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\-]+", re.ASCII)
_MULTI_HYPHEN = re.compile(r"\-\-+")

# 标题中没有任何可用字符时使用的slug
FALLBACK_SLUG = "snippet"


def slugify(text: str = "") -> str:
    """
    将字符串转换为URL安全的slug

    小写、去掉首尾空白、空白替换为连字符、去掉非单词字符、合并连续连字符。

    Args:
        text: 原始文本（通常是标题或名称）

    Returns:
        slug字符串，结果为空时返回 FALLBACK_SLUG
    """
    slug = str(text or "").lower().strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _NON_WORD.sub("", slug)
    slug = _MULTI_HYPHEN.sub("-", slug)
    return slug or FALLBACK_SLUG
