"""
业务配置相关的Pydantic模型
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional
from datetime import datetime

from app.schemas.common import format_datetime_local


class SystemConfigCreate(BaseModel):
    """创建配置模型"""
    key: str = Field(..., description="配置键", max_length=100)
    value: str = Field(..., description="配置值", max_length=500)
    description: Optional[str] = Field(None, description="配置说明", max_length=200)


class SystemConfigUpdate(BaseModel):
    """更新配置模型"""
    value: Optional[str] = Field(None, description="配置值", max_length=500)
    description: Optional[str] = Field(None, description="配置说明", max_length=200)


class SystemConfigResponse(BaseModel):
    """配置响应模型；id 为 0 表示数据库中没有记录，返回的是默认值"""
    id: int
    key: str
    value: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return format_datetime_local(dt)
