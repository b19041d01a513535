"""
Language模型 - 编程语言表
"""
# 第三方库导包
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

# 项目内部导包
from storage.database import Base


class Language(Base):
    """编程语言表"""

    __tablename__ = "languages"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, comment="语言名称")
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True, comment="语言slug")

    snippets: Mapped[list["Snippet"]] = relationship("Snippet", back_populates="language", passive_deletes=True)

    def __repr__(self):
        return f"<Language(id={self.id}, name={self.name}, slug={self.slug})>"
