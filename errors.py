"""
目录服务的业务异常
"""


class CatalogError(Exception):
    """业务异常基类"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CatalogError):
    """标识符找不到可读取（可见或本人所有）的记录"""


class ConflictError(CatalogError):
    """违反唯一性约束（slug、short_id、用户名、邮箱、API密钥等），写入被拒绝"""


class AuthorizationDeniedError(CatalogError):
    """记录存在，但当前用户无权修改"""
