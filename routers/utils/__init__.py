"""
Utils layer
工具函数层
"""

from .error_mapper import to_http_exception

__all__ = ["to_http_exception"]
