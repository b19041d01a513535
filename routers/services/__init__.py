"""
Services layer
业务逻辑层
"""

from .identity_allocator import IdentityAllocator
from .tag_index_service import TagIndexService, TagCount
from .snippet_service import SnippetService
from .user_service import UserService
from .taxonomy_service import CategoryService, LanguageService

__all__ = [
    "IdentityAllocator",
    "TagIndexService",
    "TagCount",
    "SnippetService",
    "UserService",
    "CategoryService",
    "LanguageService"
]
