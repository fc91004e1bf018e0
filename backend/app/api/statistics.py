"""
统计报表API

只根据收据快照统计，不依赖当前的商品目录。
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from datetime import date
from decimal import Decimal
from app.api.receipts import local_day_range
from app.core.security import require_view
from app.db.database import get_db
from app.models.receipt import Receipt
from app.models.role import View
from app.schemas.statistics import ProductConsumptionItem, StatisticsResponse

router = APIRouter(prefix="/api/statistics", tags=["统计报表"])

RANKING_SIZE = 5


def summarize_receipts(receipts: List[Receipt]) -> StatisticsResponse:
    """汇总收入、件数和商品消耗排行；同一商品取最近一张收据上的名称"""
    total_revenue = Decimal("0.00")
    total_items = 0
    counts: Dict[int, int] = {}
    names: Dict[int, str] = {}

    for receipt in sorted(receipts, key=lambda r: (r.created_at, r.id)):
        total_revenue += receipt.total_bill or Decimal("0")
        for item in receipt.consumed_items:
            counts[item.product_id] = counts.get(item.product_id, 0) + item.quantity
            names[item.product_id] = item.product_name
            total_items += item.quantity

    items = [
        ProductConsumptionItem(product_id=pid, product_name=names[pid], count=count)
        for pid, count in counts.items()
    ]
    most = sorted(items, key=lambda i: (-i.count, i.product_name))[:RANKING_SIZE]
    least = sorted(items, key=lambda i: (i.count, i.product_name))[:RANKING_SIZE]

    return StatisticsResponse(
        total_revenue=total_revenue.quantize(Decimal("0.01")),
        receipt_count=len(receipts),
        total_items_sold=total_items,
        most_consumed=most,
        least_consumed=least,
    )


@router.get("", response_model=StatisticsResponse)
def get_statistics(
    start_date: Optional[date] = Query(None, description="开始日期"),
    end_date: Optional[date] = Query(None, description="结束日期"),
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """销售与消耗统计"""
    query = db.query(Receipt)
    if start_date:
        query = query.filter(Receipt.created_at >= local_day_range(start_date)[0])
    if end_date:
        query = query.filter(Receipt.created_at < local_day_range(end_date)[1])
    return summarize_receipts(query.all())
