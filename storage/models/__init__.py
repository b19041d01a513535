"""
Storage models package.
"""
# 项目内部导包
from .user import User
from .category import Category
from .language import Language
from .snippet import Snippet

__all__ = [
    "User",
    "Category",
    "Language",
    "Snippet",
]
