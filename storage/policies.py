"""
可见性策略与所有权校验

所有公开读取都通过 visible_condition() 把可见性条件下推到SQL的WHERE子句，
计数和分页因此使用同一个谓词。所有权校验同样以 user_id 条件附加在
UPDATE / DELETE 语句上。
"""
# 标准库导包
from typing import Optional, Protocol

# 第三方库导包
from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement

# 项目内部导包
from storage.models.snippet import Snippet
from storage.models.user import User


class Actor(Protocol):
    """执行操作的用户（User模型或任何带 id / is_admin 的对象）"""
    id: int
    is_admin: bool


def visible_condition() -> ColumnElement[bool]:
    """
    公开可见条件：片段非私有，且作者已审核

    使用该条件的查询必须 JOIN users 表。
    """
    return and_(Snippet.is_private == False, User.is_approved == True)  # noqa: E712


def readable_condition(viewer: Optional[Actor] = None) -> ColumnElement[bool]:
    """
    单个片段的读取条件：公开可见，或属于查看者，或查看者是管理员

    Args:
        viewer: 当前用户，匿名访问为None
    """
    if viewer is None:
        return visible_condition()
    if viewer.is_admin:
        return true()
    return or_(visible_condition(), Snippet.user_id == viewer.id)


class OwnershipGuard:
    """片段修改权限校验"""

    @staticmethod
    def authorize_mutation(snippet: Snippet, actor: Actor) -> bool:
        """管理员可以修改任何片段，普通用户只能修改自己的片段"""
        if actor.is_admin:
            return True
        return snippet.user_id == actor.id

    @staticmethod
    def scope(statement, actor: Actor):
        """
        给 UPDATE / DELETE 语句附加所有权条件

        非管理员的语句总是带上 user_id = 当前用户，数据库谓词才是最终的权限判断。
        """
        if actor.is_admin:
            return statement
        return statement.where(Snippet.user_id == actor.id)
