"""
统计相关的Pydantic模型
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal


class ProductConsumptionItem(BaseModel):
    """单个商品的消耗统计"""
    product_id: int
    product_name: str
    count: int


class StatisticsResponse(BaseModel):
    """销售与消耗统计"""
    total_revenue: Decimal
    receipt_count: int
    total_items_sold: int
    most_consumed: List[ProductConsumptionItem]
    least_consumed: List[ProductConsumptionItem]
