"""
业务异常到HTTP异常的转换
"""
# 第三方库导包
from fastapi import HTTPException

# 项目内部导包
from errors import CatalogError, NotFoundError, ConflictError, AuthorizationDeniedError

_STATUS_CODES = {
    NotFoundError: 404,
    ConflictError: 409,
    AuthorizationDeniedError: 403,
}


def to_http_exception(error: CatalogError) -> HTTPException:
    """
    将业务异常转换为HTTPException

    Args:
        error: 业务异常

    Returns:
        HTTPException: 不存在 404，冲突 409，无权限 403，其余 400
    """
    for error_type, status_code in _STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)
