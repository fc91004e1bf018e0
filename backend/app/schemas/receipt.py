"""
收据相关的Pydantic模型
"""
from pydantic import BaseModel, Field, field_serializer
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from app.schemas.common import format_datetime_local
from app.schemas.room import RoomResponse


class ConsumedItemResponse(BaseModel):
    """消费明细"""
    product_id: int
    product_name: str
    quantity: int
    price_per_unit: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True


class ReplenishmentItemResponse(BaseModel):
    """补货明细"""
    product_id: int
    product_name: str
    quantity: int

    class Config:
        from_attributes = True


class ReceiptDraftResponse(BaseModel):
    """收据计算结果（未保存）"""
    consumed_items: List[ConsumedItemResponse] = []
    replenishment_items: List[ReplenishmentItemResponse] = []
    total_bill: Decimal = Decimal("0.00")

    class Config:
        from_attributes = True


class ReceiptResponse(ReceiptDraftResponse):
    """收据响应模型"""
    id: str
    room_number: str
    building: int
    created_at: datetime
    operator: Optional[str] = None

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


class CheckoutResponse(BaseModel):
    """结账响应"""
    persisted: bool = Field(..., description="收据是否已保存（空收据按配置可不保存）")
    receipt: Optional[ReceiptResponse] = None
    draft: ReceiptDraftResponse
    room: RoomResponse
