"""
公开片段路由
提供按分类、语言、作者、标签、搜索等分面浏览片段的API接口
"""
# 标准库导包
import logging
from typing import Any, Optional

# 第三方库导包
from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import settings
from errors import CatalogError
from models import (
    PageMeta,
    SnippetResponse,
    SnippetListResponse,
    SnippetCollectionResponse,
    SnippetDetailResponse,
    TagCountResponse,
    TagIndexResponse,
    TaxonomyResponse,
    TaxonomyListResponse
)
from storage.database import get_session
from storage.models.user import User
from storage.repositories.snippet_repository import Facet
from routers.services.snippet_service import SnippetService
from routers.services.taxonomy_service import CategoryService, LanguageService
from routers.services.user_service import UserService
from routers.utils import to_http_exception
from utils.auth import get_optional_user
from utils.language_map import download_filename

# 配置日志
logger = logging.getLogger(__name__)

# 创建路由器
router = APIRouter(
    prefix="/snippets",
    tags=["公开片段"]
)


def _limit_or_default(limit: Optional[int]) -> int:
    return limit or settings.ITEMS_PER_PAGE


async def _facet_page(
    session: AsyncSession,
    facet: Facet,
    value: Any,
    page: int,
    limit: int
) -> SnippetListResponse:
    """
    查询一页分面结果并计算分页信息

    Args:
        session: 数据库会话
        facet: 分面
        value: 分面值
        page: 页码
        limit: 每页数量

    Returns:
        SnippetListResponse
    """
    snippet_service = SnippetService(session)
    items, total = await snippet_service.list_page(facet, value, page, limit)
    return SnippetListResponse(
        success=True,
        message="获取成功",
        data=[SnippetResponse.model_validate(item) for item in items],
        meta=PageMeta.build(total, page, limit)
    )


@router.get("", response_model=SnippetListResponse, summary="全部片段")
async def list_snippets(
    page: int = Query(1, description="页码，小于1按1处理"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="每页数量"),
    session: AsyncSession = Depends(get_session)
):
    """分页获取全部公开片段"""
    try:
        return await _facet_page(session, Facet.ALL, None, page, _limit_or_default(limit))
    except Exception as e:
        logger.error(f"获取片段列表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取片段列表失败: {str(e)}")


@router.get("/recent", response_model=SnippetCollectionResponse, summary="最新片段")
async def list_recent_snippets(
    limit: Optional[int] = Query(None, ge=1, le=50),
    session: AsyncSession = Depends(get_session)
):
    try:
        snippets = await SnippetService(session).list_recent(limit)
        return SnippetCollectionResponse(
            data=[SnippetResponse.model_validate(item) for item in snippets],
            total=len(snippets)
        )
    except Exception as e:
        logger.error(f"获取最新片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取最新片段失败: {str(e)}")


@router.get("/tags", response_model=TagIndexResponse, summary="标签索引")
async def get_tag_index(
    session: AsyncSession = Depends(get_session)
):
    """
    获取所有公开片段使用的标签及次数

    按标签名排序
    """
    try:
        tag_index = await SnippetService(session).build_tag_index()
        return TagIndexResponse(
            data=[TagCountResponse.model_validate(tag) for tag in tag_index],
            total=len(tag_index)
        )
    except Exception as e:
        logger.error(f"获取标签索引失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取标签索引失败: {str(e)}")


@router.get("/categories", response_model=TaxonomyListResponse, summary="分类列表（含片段数）")
async def list_categories_with_counts(
    session: AsyncSession = Depends(get_session)
):
    try:
        categories = await CategoryService(session).list_with_counts()
        return TaxonomyListResponse(
            data=[TaxonomyResponse(**item) for item in categories],
            total=len(categories)
        )
    except Exception as e:
        logger.error(f"获取分类列表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取分类列表失败: {str(e)}")


@router.get("/languages", response_model=TaxonomyListResponse, summary="语言列表（含片段数）")
async def list_languages_with_counts(
    session: AsyncSession = Depends(get_session)
):
    try:
        languages = await LanguageService(session).list_with_counts()
        return TaxonomyListResponse(
            data=[TaxonomyResponse(**item) for item in languages],
            total=len(languages)
        )
    except Exception as e:
        logger.error(f"获取语言列表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取语言列表失败: {str(e)}")


@router.get("/search", response_model=SnippetListResponse, summary="搜索片段")
async def search_snippets(
    q: str = Query("", description="搜索词，在标题、描述、代码中做子串匹配"),
    page: int = Query(1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    """搜索词为空时返回全部片段"""
    try:
        term = q.strip()
        facet = Facet.SEARCH if term else Facet.ALL
        return await _facet_page(session, facet, term, page, _limit_or_default(limit))
    except Exception as e:
        logger.error(f"搜索片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"搜索片段失败: {str(e)}")


@router.get("/category/{slug}", response_model=SnippetListResponse, summary="按分类浏览")
async def list_by_category(
    slug: str,
    page: int = Query(1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    try:
        category = await CategoryService(session).get_by_slug(slug)
        return await _facet_page(session, Facet.CATEGORY, category.id, page, _limit_or_default(limit))
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"按分类获取片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"按分类获取片段失败: {str(e)}")


@router.get("/language/{slug}", response_model=SnippetListResponse, summary="按语言浏览")
async def list_by_language(
    slug: str,
    page: int = Query(1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    try:
        language = await LanguageService(session).get_by_slug(slug)
        return await _facet_page(session, Facet.LANGUAGE, language.id, page, _limit_or_default(limit))
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"按语言获取片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"按语言获取片段失败: {str(e)}")


@router.get("/author/{username}", response_model=SnippetListResponse, summary="按作者浏览")
async def list_by_author(
    username: str,
    page: int = Query(1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    """作者不存在时返回404，避免用户名拼错时显示空列表"""
    try:
        author = await UserService(session).get_by_username(username)
        return await _facet_page(session, Facet.AUTHOR, author.username, page, _limit_or_default(limit))
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"按作者获取片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"按作者获取片段失败: {str(e)}")


@router.get("/tag/{tag}", response_model=SnippetListResponse, summary="按标签浏览")
async def list_by_tag(
    tag: str,
    page: int = Query(1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    try:
        return await _facet_page(session, Facet.TAG, tag, page, _limit_or_default(limit))
    except Exception as e:
        logger.error(f"按标签获取片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"按标签获取片段失败: {str(e)}")


@router.get("/{identifier}", response_model=SnippetDetailResponse, summary="片段详情")
async def get_snippet(
    identifier: str,
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session)
):
    """
    根据slug或short_id获取片段详情

    私有片段只对所有者和管理员可见
    """
    try:
        snippet = await SnippetService(session).get_by_identifier(identifier, viewer)
        return SnippetDetailResponse(data=SnippetResponse.model_validate(snippet))
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"获取片段详情失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取片段详情失败: {str(e)}")


@router.get("/{identifier}/download", response_class=PlainTextResponse, summary="下载片段代码")
async def download_snippet(
    identifier: str,
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session)
):
    """以附件形式下载代码，文件扩展名由语言决定"""
    try:
        snippet = await SnippetService(session).get_by_identifier(identifier, viewer)
    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"下载片段失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"下载片段失败: {str(e)}")

    filename = download_filename(snippet.slug, snippet.language_slug)
    return PlainTextResponse(
        content=snippet.code,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
