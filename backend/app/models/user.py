"""
用户模型
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base


class User(Base):
    """用户表"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False, unique=True, index=True, comment="用户名")
    passkey_hash = Column(String(255), nullable=False, comment="4位口令的哈希")
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True, comment="角色ID")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    role = relationship("Role", back_populates="users")

    __table_args__ = (
        Index("idx_users_username", "username"),
    )
