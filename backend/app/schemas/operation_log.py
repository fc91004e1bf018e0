"""
操作日志相关的Pydantic模型
"""
from pydantic import BaseModel, field_serializer
from typing import Optional
from datetime import datetime

from app.schemas.common import format_datetime_local


class OperationLogResponse(BaseModel):
    """操作日志响应模型"""
    id: int
    user_id: Optional[int] = None
    username: str
    action: str
    module: str
    method: str
    path: str
    ip_address: Optional[str] = None
    request_data: Optional[str] = None
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    execution_time: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)
