"""
基础Repository类
"""
# 标准库导包
import logging
from typing import TypeVar, Generic, Optional, List, Dict, Any

# 第三方库导包
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_
from sqlalchemy.sql import func

# 项目内部导包
from errors import ConflictError
from storage.database import Base

# 配置日志
logger = logging.getLogger(__name__)

# 泛型类型
ModelType = TypeVar('ModelType', bound=Base)


class BaseRepository(Generic[ModelType]):
    """基础Repository类，提供通用的CRUD操作"""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        """
        初始化Repository

        Args:
            session: 数据库会话
            model: 数据库模型类
        """
        self.session = session
        self.model = model

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        根据ID获取单条记录

        Args:
            id: 记录ID

        Returns:
            模型实例或None
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs) -> ModelType:
        """
        创建新记录

        插入在SAVEPOINT中执行，违反约束时只回滚本次插入，会话仍可继续使用。

        Args:
            **kwargs: 模型字段值

        Returns:
            创建的模型实例

        Raises:
            ConflictError: 违反唯一性或外键约束
        """
        instance = self.model(**kwargs)
        try:
            async with self.session.begin_nested():
                self.session.add(instance)
                await self.session.flush()
        except IntegrityError as e:
            logger.warning(f"{self.model.__tablename__} 插入违反约束: {e.orig}")
            raise ConflictError(f"{self.model.__tablename__} 记录违反唯一性约束") from e

        await self.session.refresh(instance)
        return instance

    async def update_where(self, conditions: List, **values) -> int:
        """
        按条件更新记录

        Args:
            conditions: WHERE条件列表
            **values: 要更新的字段值

        Returns:
            受影响的行数

        Raises:
            ConflictError: 违反唯一性或外键约束
        """
        statement = update(self.model).where(and_(*conditions)).values(**values)
        return await self.execute_write(statement)

    async def update_by_id(self, id: int, **kwargs) -> Optional[ModelType]:
        """
        根据ID更新记录

        Args:
            id: 记录ID
            **kwargs: 要更新的字段值

        Returns:
            更新后的模型实例或None
        """
        affected = await self.update_where([self.model.id == id], **kwargs)
        if not affected:
            return None

        # 重新查询更新后的记录
        updated_instance = await self.get_by_id(id)
        if updated_instance:
            await self.session.refresh(updated_instance)
        return updated_instance

    async def delete_by_id(self, id: int) -> bool:
        """
        根据ID删除记录

        Args:
            id: 记录ID

        Returns:
            是否删除成功
        """
        affected = await self.execute_write(
            delete(self.model).where(self.model.id == id)
        )
        return affected > 0

    async def execute_write(self, statement) -> int:
        """
        在SAVEPOINT中执行UPDATE / DELETE语句

        Returns:
            受影响的行数
        """
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    statement.execution_options(synchronize_session=False)
                )
        except IntegrityError as e:
            logger.warning(f"{self.model.__tablename__} 写入违反约束: {e.orig}")
            raise ConflictError(f"{self.model.__tablename__} 记录违反唯一性约束") from e
        return result.rowcount

    async def count(self, **filters) -> int:
        """
        统计记录数量

        Args:
            **filters: 等值过滤条件

        Returns:
            记录数量
        """
        query = select(func.count(self.model.id))
        conditions = self._build_filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    async def exists(self, exclude_id: Optional[int] = None, **filters) -> bool:
        """
        检查记录是否存在

        Args:
            exclude_id: 排除的记录ID（更新时排除自身）
            **filters: 等值过滤条件

        Returns:
            是否存在
        """
        conditions = self._build_filter_conditions(filters)
        if exclude_id is not None:
            conditions.append(self.model.id != exclude_id)

        query = select(self.model.id).limit(1)
        if conditions:
            query = query.where(and_(*conditions))
        result = await self.session.execute(query)
        return result.first() is not None

    def _build_filter_conditions(self, filters: Dict[str, Any]) -> List:
        """
        构建过滤条件

        Args:
            filters: 过滤条件字典，列表值生成IN条件，其余为等于条件

        Returns:
            条件列表
        """
        conditions = []

        for key, value in filters.items():
            if not hasattr(self.model, key):
                continue

            column = getattr(self.model, key)
            if isinstance(value, (list, tuple)):
                conditions.append(column.in_(value))
            else:
                conditions.append(column == value)

        return conditions

    async def query_by_filters(
        self,
        filters: Dict[str, Any],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[str] = None,
        order_desc: bool = True
    ) -> List[ModelType]:
        """
        根据过滤条件查询记录

        Args:
            filters: 过滤条件字典
            limit: 限制返回数量
            offset: 偏移量
            order_by: 排序字段
            order_desc: 是否降序

        Returns:
            模型实例列表
        """
        conditions = self._build_filter_conditions(filters)
        query = select(self.model)

        if conditions:
            query = query.where(and_(*conditions))

        if order_by and hasattr(self.model, order_by):
            column = getattr(self.model, order_by)
            if order_desc:
                query = query.order_by(column.desc())
            else:
                query = query.order_by(column.asc())

        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
