"""
Snippet模型 - 代码片段表
"""
# 标准库导包
from datetime import datetime
from typing import Optional

# 第三方库导包
from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

# 项目内部导包
from storage.database import Base, utcnow


class Snippet(Base):
    """代码片段表"""

    __tablename__ = "snippets"

    # 核心字段
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, comment="标题")
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, comment="SEO友好的唯一标识")
    short_id: Mapped[str] = mapped_column(String(16), nullable=False, unique=True, comment="短链接标识，创建后不再变化")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="描述")
    code: Mapped[str] = mapped_column(Text, nullable=False, comment="代码内容")
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="逗号分隔的标签字符串")
    reference_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True, comment="参考链接")
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, comment="是否私有")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, comment="创建时间，只设置一次")

    # 外键
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    language_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("languages.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # 关系定义
    user: Mapped["User"] = relationship("User", back_populates="snippets")
    category: Mapped[Optional["Category"]] = relationship("Category", back_populates="snippets")
    language: Mapped[Optional["Language"]] = relationship("Language", back_populates="snippets")

    # 复合索引
    __table_args__ = (
        Index("idx_snippet_created", "created_at", "id"),
    )

    def __repr__(self):
        return f"<Snippet(id={self.id}, slug={self.slug}, short_id={self.short_id}, user_id={self.user_id})>"
