"""
管理后台路由
管理员管理片段、分类、语言和用户
"""
# 标准库导包
import logging

# 第三方库导包
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from errors import CatalogError
from models import (
    SnippetResponse,
    SnippetCollectionResponse,
    DeleteResponse,
    TaxonomyRequest,
    TaxonomyResponse,
    TaxonomyListResponse,
    CreateUserRequest,
    ApproveUserRequest,
    UserResponse,
    UserListResponse
)
from storage.database import get_session
from storage.models.user import User
from routers.services.snippet_service import SnippetService
from routers.services.taxonomy_service import TaxonomyService, CategoryService, LanguageService
from routers.services.user_service import UserService
from routers.utils import to_http_exception
from utils.auth import require_admin

# 配置日志
logger = logging.getLogger(__name__)

# 创建路由器
router = APIRouter(
    prefix="/admin",
    tags=["管理后台"],
    dependencies=[Depends(require_admin)]
)


def _taxonomy_service(kind: str, session: AsyncSession) -> TaxonomyService:
    if kind == "categories":
        return CategoryService(session)
    if kind == "languages":
        return LanguageService(session)
    raise HTTPException(status_code=404, detail=f"未知类型: {kind}")


@router.get("/snippets", response_model=SnippetCollectionResponse, summary="全部片段")
async def list_all_snippets(
    session: AsyncSession = Depends(get_session)
):
    """不应用可见性过滤，包含私有片段和未审核用户的片段"""
    try:
        snippets = await SnippetService(session).list_all_for_admin()
        return SnippetCollectionResponse(
            data=[SnippetResponse.model_validate(item) for item in snippets],
            total=len(snippets)
        )
    except Exception as e:
        logger.error(f"获取全部片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取全部片段失败: {str(e)}")


# ========== 用户 ==========

@router.get("/users", response_model=UserListResponse, summary="用户列表")
async def list_users(
    session: AsyncSession = Depends(get_session)
):
    try:
        users = await UserService(session).list_users()
        return UserListResponse(
            data=[UserResponse.model_validate(user) for user in users],
            total=len(users)
        )
    except Exception as e:
        logger.error(f"获取用户列表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取用户列表失败: {str(e)}")


@router.post("/users", response_model=UserResponse, status_code=201, summary="创建用户")
async def create_user(
    request: CreateUserRequest,
    session: AsyncSession = Depends(get_session)
):
    """管理员创建的用户直接审核通过"""
    try:
        user = await UserService(session).create_by_admin(
            username=request.username,
            email=request.email,
            password=request.password,
            is_admin=request.is_admin
        )
        return UserResponse.model_validate(user)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"创建用户失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"创建用户失败: {str(e)}")


@router.post("/users/{user_id}/approval", response_model=UserResponse, summary="审核用户")
async def approve_user(
    user_id: int,
    request: ApproveUserRequest,
    session: AsyncSession = Depends(get_session)
):
    try:
        user = await UserService(session).set_approval(user_id, request.is_approved)
        return UserResponse.model_validate(user)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"审核用户失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"审核用户失败: {str(e)}")


@router.delete("/users/{user_id}", response_model=DeleteResponse, summary="删除用户")
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    """删除用户及其全部片段"""
    try:
        if user_id == admin.id:
            raise HTTPException(status_code=400, detail="不能删除当前登录的管理员")
        deleted = await UserService(session).delete_user(user_id)
        if not deleted:
            raise HTTPException(status_code=404, detail="用户不存在")
        return DeleteResponse(deleted=1)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"删除用户失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"删除用户失败: {str(e)}")


# ========== 分类 / 语言 ==========

@router.get("/{kind}", response_model=TaxonomyListResponse, summary="分类或语言列表")
async def list_taxonomy(
    kind: str,
    session: AsyncSession = Depends(get_session)
):
    """kind 为 categories 或 languages"""
    try:
        items = await _taxonomy_service(kind, session).list_all()
        return TaxonomyListResponse(
            data=[TaxonomyResponse.model_validate(item) for item in items],
            total=len(items)
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"获取{kind}列表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取列表失败: {str(e)}")


@router.post("/{kind}", response_model=TaxonomyResponse, status_code=201, summary="创建分类或语言")
async def create_taxonomy(
    kind: str,
    request: TaxonomyRequest,
    session: AsyncSession = Depends(get_session)
):
    try:
        item = await _taxonomy_service(kind, session).create(request.name)
        return TaxonomyResponse.model_validate(item)
    except HTTPException:
        raise
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"创建{kind}失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"创建失败: {str(e)}")


@router.put("/{kind}/{item_id}", response_model=TaxonomyResponse, summary="重命名分类或语言")
async def rename_taxonomy(
    kind: str,
    item_id: int,
    request: TaxonomyRequest,
    session: AsyncSession = Depends(get_session)
):
    try:
        item = await _taxonomy_service(kind, session).rename(item_id, request.name)
        return TaxonomyResponse.model_validate(item)
    except HTTPException:
        raise
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"重命名{kind}失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"重命名失败: {str(e)}")


@router.delete("/{kind}/{item_id}", response_model=DeleteResponse, summary="删除分类或语言")
async def delete_taxonomy(
    kind: str,
    item_id: int,
    session: AsyncSession = Depends(get_session)
):
    """删除后关联片段的分类 / 语言被置空，片段本身保留"""
    try:
        await _taxonomy_service(kind, session).remove(item_id)
        return DeleteResponse(deleted=1)
    except HTTPException:
        raise
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"删除{kind}失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"删除失败: {str(e)}")


