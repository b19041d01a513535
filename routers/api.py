"""
API路由
通过API密钥创建、修改、删除自己的片段，以及注册和账户管理
"""
# 标准库导包
import logging
from typing import Optional

# 第三方库导包
from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import settings
from errors import CatalogError
from models import (
    PageMeta,
    SnippetRequest,
    SnippetResponse,
    SnippetListResponse,
    SnippetCollectionResponse,
    SnippetDetailResponse,
    DeleteResponse,
    TaxonomyResponse,
    ApiKeyResponse,
    RegisterRequest,
    UpdateEmailRequest,
    UpdatePasswordRequest,
    UserResponse
)
from storage.database import get_session
from storage.models.user import User
from storage.repositories.snippet_repository import Facet
from routers.services.snippet_service import SnippetService
from routers.services.taxonomy_service import CategoryService, LanguageService
from routers.services.user_service import UserService
from routers.utils import to_http_exception
from utils.auth import get_current_user

# 配置日志
logger = logging.getLogger(__name__)

# 创建路由器
router = APIRouter(
    prefix="/api",
    tags=["API"]
)

NOT_FOUND_OR_DENIED = "片段不存在或无权操作"


@router.post("/snippets", response_model=SnippetDetailResponse, status_code=201, summary="创建片段")
async def create_snippet(
    request: SnippetRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """创建片段，所有者为当前API密钥对应的用户"""
    try:
        snippet_service = SnippetService(session)
        snippet = await snippet_service.create_snippet(owner_id=user.id, **request.model_dump())
        detail = await snippet_service.get_by_identifier(snippet.short_id, viewer=user)
        return SnippetDetailResponse(
            message="创建成功",
            data=SnippetResponse.model_validate(detail)
        )
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"创建片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"创建片段失败: {str(e)}")


@router.get("/snippets", response_model=SnippetListResponse, summary="我的公开片段")
async def list_user_snippets(
    page: int = Query(1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """分页获取当前用户的公开片段"""
    try:
        limit = limit or settings.API_ITEMS_PER_PAGE
        items, total = await SnippetService(session).list_page(Facet.OWNER, user.id, page, limit)
        return SnippetListResponse(
            data=[SnippetResponse.model_validate(item) for item in items],
            meta=PageMeta.build(total, page, limit)
        )
    except Exception as e:
        logger.error(f"获取用户片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取用户片段失败: {str(e)}")


@router.get("/snippets/mine", response_model=SnippetCollectionResponse, summary="管理面板片段列表")
async def list_dashboard_snippets(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """管理员返回全部片段，普通用户返回自己的全部片段（包括私有）"""
    try:
        snippets = await SnippetService(session).list_dashboard(user)
        return SnippetCollectionResponse(
            data=[SnippetResponse.model_validate(item) for item in snippets],
            total=len(snippets)
        )
    except Exception as e:
        logger.error(f"获取管理面板片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取管理面板片段失败: {str(e)}")


@router.get("/snippets/{snippet_id}", response_model=SnippetDetailResponse, summary="获取待编辑片段")
async def get_snippet_for_edit(
    snippet_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """片段不存在返回404，不属于当前用户返回403"""
    try:
        snippet_service = SnippetService(session)
        snippet = await snippet_service.get_for_edit(snippet_id, user)
        detail = await snippet_service.get_by_identifier(snippet.short_id, viewer=user)
        return SnippetDetailResponse(data=SnippetResponse.model_validate(detail))
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"获取待编辑片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取待编辑片段失败: {str(e)}")


@router.put("/snippets/{snippet_id}", response_model=SnippetDetailResponse, summary="更新片段")
async def update_snippet(
    snippet_id: int,
    request: SnippetRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """
    更新片段

    不存在和无权修改统一返回404
    """
    try:
        snippet_service = SnippetService(session)
        snippet = await snippet_service.update_snippet(snippet_id, user, **request.model_dump())
        if snippet is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND_OR_DENIED)

        detail = await snippet_service.get_by_identifier(snippet.short_id, viewer=user)
        return SnippetDetailResponse(
            message="更新成功",
            data=SnippetResponse.model_validate(detail)
        )
    except HTTPException:
        raise
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"更新片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"更新片段失败: {str(e)}")


@router.delete("/snippets/{snippet_id}", response_model=DeleteResponse, summary="删除片段")
async def delete_snippet(
    snippet_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """不存在和无权删除统一返回404"""
    try:
        deleted = await SnippetService(session).remove_snippet(snippet_id, user)
        if not deleted:
            raise HTTPException(status_code=404, detail=NOT_FOUND_OR_DENIED)
        return DeleteResponse(deleted=deleted)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"删除片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"删除片段失败: {str(e)}")


@router.get("/categories/lookup/{name}", response_model=TaxonomyResponse, summary="查找分类")
async def lookup_category(
    name: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """按名称或slug查找分类，返回ID"""
    try:
        category = await CategoryService(session).lookup(name)
        return TaxonomyResponse.model_validate(category)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"查找分类失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"查找分类失败: {str(e)}")


@router.get("/languages/lookup/{name}", response_model=TaxonomyResponse, summary="查找语言")
async def lookup_language(
    name: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """按名称或slug查找语言，返回ID"""
    try:
        language = await LanguageService(session).lookup(name)
        return TaxonomyResponse.model_validate(language)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"查找语言失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"查找语言失败: {str(e)}")


@router.post("/key/regenerate", response_model=ApiKeyResponse, summary="重新生成API密钥")
async def regenerate_api_key(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    try:
        api_key = await UserService(session).regenerate_api_key(user.id)
        return ApiKeyResponse(api_key=api_key)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"重新生成API密钥失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"重新生成API密钥失败: {str(e)}")


# ========== 账户 ==========

@router.post("/register", response_model=UserResponse, status_code=201, summary="注册用户")
async def register_user(
    request: RegisterRequest,
    session: AsyncSession = Depends(get_session)
):
    """
    公开注册

    新用户未审核，审核通过前API密钥不可用。用户名或邮箱已存在返回409。
    """
    try:
        user = await UserService(session).register(
            username=request.username,
            email=request.email,
            password=request.password
        )
        return UserResponse.model_validate(user)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"注册用户失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"注册用户失败: {str(e)}")


@router.put("/account/email", response_model=UserResponse, summary="修改邮箱")
async def update_account_email(
    request: UpdateEmailRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    try:
        updated = await UserService(session).update_email(user.id, request.email)
        return UserResponse.model_validate(updated)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"修改邮箱失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"修改邮箱失败: {str(e)}")


@router.put("/account/password", response_model=UserResponse, summary="修改密码")
async def update_account_password(
    request: UpdatePasswordRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """当前密码不正确返回403"""
    try:
        updated = await UserService(session).change_password(
            user.id, request.current_password, request.new_password
        )
        return UserResponse.model_validate(updated)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"修改密码失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"修改密码失败: {str(e)}")
