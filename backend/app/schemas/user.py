"""
用户相关的Pydantic模型
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional
from datetime import datetime

from app.schemas.common import format_datetime_local

PASSKEY_PATTERN = r"^\d{4}$"


class UserCreate(BaseModel):
    """创建用户模型"""
    username: str = Field(..., description="用户名", min_length=1, max_length=100)
    passkey: str = Field(..., description="4位数字口令", pattern=PASSKEY_PATTERN)
    role_id: int = Field(..., description="角色ID")


class UserUpdate(BaseModel):
    """更新用户模型"""
    username: Optional[str] = Field(None, description="用户名", min_length=1, max_length=100)
    passkey: Optional[str] = Field(None, description="4位数字口令", pattern=PASSKEY_PATTERN)
    role_id: Optional[int] = Field(None, description="角色ID")


class UserResponse(BaseModel):
    """用户响应模型（不返回口令）"""
    id: int
    username: str
    role_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)
