"""
角色相关的Pydantic模型
"""
from pydantic import BaseModel, Field, field_serializer
from typing import List, Optional
from datetime import datetime

from app.models.role import View
from app.schemas.common import format_datetime_local


class RoleCreate(BaseModel):
    """创建角色模型"""
    name: str = Field(..., description="角色名称", min_length=1, max_length=100)
    permissions: List[View] = Field(default_factory=list, description="可访问的视图")


class RoleUpdate(BaseModel):
    """更新角色模型"""
    name: Optional[str] = Field(None, description="角色名称", min_length=1, max_length=100)
    permissions: Optional[List[View]] = Field(None, description="可访问的视图")


class RoleResponse(BaseModel):
    """角色响应模型"""
    id: int
    name: str
    permissions: List[View]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)
