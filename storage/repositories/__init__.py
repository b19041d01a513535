"""
Storage repositories package.
"""
# 项目内部导包
from .base import BaseRepository
from .snippet_repository import SnippetRepository, SnippetView, Facet, page_window
from .taxonomy_repository import TaxonomyRepository
from .category_repository import CategoryRepository
from .language_repository import LanguageRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "SnippetRepository",
    "SnippetView",
    "Facet",
    "page_window",
    "TaxonomyRepository",
    "CategoryRepository",
    "LanguageRepository",
    "UserRepository",
]
