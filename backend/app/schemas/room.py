"""
房间相关的Pydantic模型
"""
from pydantic import BaseModel, Field, conint, field_serializer
from typing import Dict, Optional
from datetime import datetime

from app.schemas.common import MAX_QUANTITY, format_datetime_local


class RoomCreate(BaseModel):
    """创建房间模型"""
    number: str = Field(..., description="房间号", min_length=1, max_length=20)
    building: int = Field(..., ge=1, description="楼栋")


class RoomUpdate(BaseModel):
    """更新房间模型（改房间号不影响库存）"""
    number: Optional[str] = Field(None, description="新房间号", min_length=1, max_length=20)
    building: Optional[int] = Field(None, ge=1, description="楼栋")


class RoomResponse(BaseModel):
    """房间响应模型"""
    id: int
    number: str
    building: int
    stock: Dict[int, int] = Field(default_factory=dict, description="库存 {商品ID: 数量}")
    last_checkout_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer('last_checkout_at', 'created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


class StockUpdateRequest(BaseModel):
    """手动设置库存（客房部补货后）"""
    stock: Dict[int, conint(le=MAX_QUANTITY)] = Field(..., description="{商品ID: 数量}，未列出的商品保持不变")


class ConsumptionRequest(BaseModel):
    """本次查房的消耗数量"""
    consumption: Dict[int, conint(le=MAX_QUANTITY)] = Field(default_factory=dict, description="{商品ID: 消耗数量}")
