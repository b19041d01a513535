"""
User模型 - 用户表
"""
# 标准库导包
from datetime import datetime
from typing import Optional

# 第三方库导包
from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

# 项目内部导包
from storage.database import Base, utcnow


class User(Base):
    """用户表"""

    __tablename__ = "users"

    # 核心字段
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, comment="用户名")
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, comment="邮箱")
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, comment="密码哈希")
    api_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True, comment="API密钥")
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, comment="是否管理员")
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, comment="是否已审核，未审核用户的片段不公开")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    # 关系定义，删除用户时级联删除其片段
    snippets: Mapped[list["Snippet"]] = relationship(
        "Snippet",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, is_admin={self.is_admin}, is_approved={self.is_approved})>"
