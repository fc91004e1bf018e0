"""
收据查询API

收据只能通过结账生成，这里只提供查询。
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date, datetime, timedelta, timezone
from app.core.security import require_view
from app.db.database import get_db
from app.models.receipt import Receipt
from app.models.role import View
from app.schemas.common import CHINA_TZ
from app.schemas.receipt import ReceiptResponse

router = APIRouter(prefix="/api/receipts", tags=["收据查询"])


def local_day_range(target_date: date):
    """本地日期对应的UTC时间范围 [start, end)"""
    start = datetime.combine(target_date, datetime.min.time(), tzinfo=CHINA_TZ).astimezone(timezone.utc)
    return start, start + timedelta(days=1)


@router.get("", response_model=List[ReceiptResponse])
def get_receipts(
    target_date: Optional[date] = Query(None, alias="date", description="日期，格式：YYYY-MM-DD"),
    room: Optional[str] = Query(None, description="房间号（模糊匹配）"),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.FRONT_DESK)),
):
    """获取收据列表（最新的在前）"""
    query = db.query(Receipt)
    if target_date:
        start, end = local_day_range(target_date)
        query = query.filter(Receipt.created_at >= start, Receipt.created_at < end)
    if room:
        query = query.filter(Receipt.room_number.like(f"%{room.strip()}%"))
    return query.order_by(desc(Receipt.created_at), desc(Receipt.id)).offset(skip).limit(limit).all()


@router.get("/{receipt_id}", response_model=ReceiptResponse)
def get_receipt(
    receipt_id: str,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.FRONT_DESK)),
):
    """获取收据详情"""
    receipt = db.query(Receipt).filter(Receipt.id == receipt_id).first()
    if not receipt:
        raise HTTPException(status_code=404, detail="收据不存在")
    return receipt
