"""
Category模型 - 分类表
"""
# 第三方库导包
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

# 项目内部导包
from storage.database import Base


class Category(Base):
    """分类表"""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, comment="分类名称")
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True, comment="分类slug")

    # 删除分类时片段的外键置空，由数据库 ON DELETE SET NULL 完成
    snippets: Mapped[list["Snippet"]] = relationship("Snippet", back_populates="category", passive_deletes=True)

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name}, slug={self.slug})>"
