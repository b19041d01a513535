"""
数据模型定义
"""
# 标准库导包
import math
from typing import Optional, List
from datetime import datetime

# 第三方库导包
from pydantic import BaseModel, ConfigDict, Field


class PageMeta(BaseModel):
    """分页信息"""
    current_page: int
    limit: int
    total_items: int
    total_pages: int

    @classmethod
    def build(cls, total_items: int, page: int, limit: int) -> "PageMeta":
        """根据总数计算分页信息，total_pages = ceil(total / limit)"""
        page = max(page, 1)
        limit = max(limit, 1)
        return cls(
            current_page=page,
            limit=limit,
            total_items=total_items,
            total_pages=math.ceil(total_items / limit)
        )


# ========== 片段相关模型 ==========

class SnippetRequest(BaseModel):
    """创建 / 更新片段请求模型"""
    title: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, description="代码内容")
    description: Optional[str] = None
    tags: Optional[str] = Field(default=None, description="逗号分隔的标签，例如 cli, script")
    category_id: Optional[int] = None
    language_id: Optional[int] = None
    reference_url: Optional[str] = None
    is_private: bool = False


class SnippetResponse(BaseModel):
    """片段响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    short_id: str
    description: Optional[str] = None
    code: str
    tags: Optional[str] = None
    reference_url: Optional[str] = None
    is_private: bool
    created_at: datetime
    user_id: int
    category_id: Optional[int] = None
    language_id: Optional[int] = None
    category_name: Optional[str] = None
    category_slug: Optional[str] = None
    language_name: Optional[str] = None
    language_slug: Optional[str] = None
    author_name: Optional[str] = None


class SnippetListResponse(BaseModel):
    """片段列表响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: List[SnippetResponse]
    meta: PageMeta


class SnippetCollectionResponse(BaseModel):
    """不分页的片段列表响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: List[SnippetResponse]
    total: int


class SnippetDetailResponse(BaseModel):
    """片段详情响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: SnippetResponse


class DeleteResponse(BaseModel):
    """删除响应模型"""
    success: bool = True
    message: str = "删除成功"
    deleted: int


class TagCountResponse(BaseModel):
    """标签统计响应模型"""
    model_config = ConfigDict(from_attributes=True)

    name: str
    count: int


class TagIndexResponse(BaseModel):
    """标签索引响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: List[TagCountResponse]
    total: int


# ========== 分类 / 语言相关模型 ==========

class TaxonomyRequest(BaseModel):
    """创建 / 重命名分类或语言请求模型"""
    name: str = Field(..., min_length=1, max_length=100)


class TaxonomyResponse(BaseModel):
    """分类 / 语言响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    count: Optional[int] = None


class TaxonomyListResponse(BaseModel):
    """分类 / 语言列表响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: List[TaxonomyResponse]
    total: int


# ========== 用户相关模型 ==========

class CreateUserRequest(BaseModel):
    """创建用户请求模型"""
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    is_admin: bool = False


class RegisterRequest(BaseModel):
    """公开注册请求模型"""
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class UpdateEmailRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)


class UpdatePasswordRequest(BaseModel):
    """修改密码请求模型，需要提供当前密码"""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class ApproveUserRequest(BaseModel):
    """审核用户请求模型"""
    is_approved: bool = True


class UserResponse(BaseModel):
    """用户响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    is_admin: bool
    is_approved: bool
    created_at: datetime


class UserListResponse(BaseModel):
    """用户列表响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: List[UserResponse]
    total: int


class ApiKeyResponse(BaseModel):
    """API密钥响应模型"""
    success: bool = True
    message: str = "API密钥已重新生成"
    api_key: str
