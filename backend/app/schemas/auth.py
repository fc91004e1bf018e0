"""
认证相关的Pydantic模型
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from app.models.role import View


class LoginRequest(BaseModel):
    """登录请求"""
    username: str = Field(..., description="用户名")
    passkey: str = Field(..., description="4位数字口令")


class LoginResponse(BaseModel):
    """登录响应"""
    accessToken: str = Field(..., description="访问令牌")
    username: str = Field(..., description="用户名")
    role: str = Field(..., description="角色名称")
    permissions: List[View] = []
    defaultView: Optional[View] = Field(None, description="登录后默认进入的视图")


class UserInfoResponse(BaseModel):
    """当前用户信息"""
    id: int
    username: str
    role: str
    permissions: List[View] = []
