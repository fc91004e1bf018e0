"""
商品相关的Pydantic模型
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.schemas.common import MAX_QUANTITY, format_datetime_local


class ProductBase(BaseModel):
    """商品基础模型"""
    name: str = Field(..., description="名称", min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="单价")
    standard_stock: int = Field(..., ge=0, le=MAX_QUANTITY, description="标准库存")
    image_ref: Optional[str] = Field(None, description="图片引用", max_length=500)


class ProductCreate(ProductBase):
    """创建商品模型"""
    pass


class ProductUpdate(BaseModel):
    """更新商品模型"""
    name: Optional[str] = Field(None, description="名称", min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2, description="单价")
    standard_stock: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY, description="标准库存")
    image_ref: Optional[str] = Field(None, description="图片引用（传 null 清除）", max_length=500)


class ProductResponse(ProductBase):
    """商品响应模型"""
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)
