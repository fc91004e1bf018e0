"""
角色模型
"""
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import object_session, relationship
from sqlalchemy.sql import func
from app.db.database import Base


class View(str, enum.Enum):
    """可授权的视图"""
    ROOMS = "Rooms"
    FRONT_DESK = "FrontDesk"
    MANAGEMENT = "Management"
    ADMIN = "Admin"


class Role(Base):
    """角色表"""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True, index=True, comment="角色名称")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    # 关系
    permission_entries = relationship(
        "RolePermission", back_populates="role", cascade="all, delete-orphan", order_by="RolePermission.id"
    )
    users = relationship("User", back_populates="role")

    @property
    def permissions(self) -> list:
        """按授予顺序排列的视图列表"""
        return [View(entry.view) for entry in self.permission_entries]

    def set_permissions(self, views) -> None:
        """按给定顺序替换权限（去重）；第一个权限即登录后的默认视图"""
        wanted = []
        for view in views:
            value = View(view).value
            if value not in wanted:
                wanted.append(value)

        # 先删除旧条目再插入，避免 (role_id, view) 唯一约束冲突
        self.permission_entries = []
        session = object_session(self)
        if session is not None and self.id is not None:
            session.flush()
        self.permission_entries = [RolePermission(view=value) for value in wanted]

    def allows(self, view: View) -> bool:
        return any(entry.view == view.value for entry in self.permission_entries)


class RolePermission(Base):
    """角色权限表"""
    __tablename__ = "role_permissions"

    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True, comment="角色ID")
    view = Column(String(20), nullable=False, comment="视图：Rooms, FrontDesk, Management, Admin")

    role = relationship("Role", back_populates="permission_entries")

    __table_args__ = (
        UniqueConstraint("role_id", "view", name="uq_role_permissions_role_view"),
        Index("idx_role_permissions_role_id", "role_id"),
    )
