"""
操作日志API
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List, Optional
from datetime import date, datetime, timedelta
from app.api.receipts import local_day_range
from app.core.security import require_view
from app.db.database import get_db
from app.models.operation_log import OperationLog
from app.models.role import View
from app.schemas.operation_log import OperationLogResponse

router = APIRouter(prefix="/api/operation-logs", tags=["操作日志"])


@router.get("", response_model=List[OperationLogResponse])
def get_operation_logs(
    skip: int = Query(0, ge=0, description="跳过记录数"),
    limit: int = Query(50, ge=1, le=1000, description="返回记录数"),
    username: Optional[str] = Query(None, description="用户名筛选"),
    module: Optional[str] = Query(None, description="模块筛选"),
    start_date: Optional[date] = Query(None, description="开始日期"),
    end_date: Optional[date] = Query(None, description="结束日期"),
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """获取操作日志列表"""
    query = db.query(OperationLog)

    if username:
        query = query.filter(OperationLog.username.like(f"%{username}%"))
    if module:
        query = query.filter(OperationLog.module.like(f"%{module}%"))

    # 日期范围筛选
    if start_date:
        query = query.filter(OperationLog.created_at >= local_day_range(start_date)[0])
    if end_date:
        query = query.filter(OperationLog.created_at < local_day_range(end_date)[1])

    return query.order_by(desc(OperationLog.created_at), desc(OperationLog.id)).offset(skip).limit(limit).all()


@router.get("/{log_id}", response_model=OperationLogResponse)
def get_operation_log(
    log_id: int,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """获取操作日志详情"""
    log = db.query(OperationLog).filter(OperationLog.id == log_id).first()
    if not log:
        raise HTTPException(status_code=404, detail="操作日志不存在")
    return log


@router.delete("")
def clear_operation_logs(
    days: int = Query(30, ge=1, le=365, description="保留最近N天的日志"),
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """清理操作日志（保留最近N天的日志）"""
    cutoff_date = datetime.now() - timedelta(days=days)
    deleted_count = db.query(OperationLog).filter(
        OperationLog.created_at < cutoff_date
    ).delete()
    db.commit()
    return {"message": f"已删除 {deleted_count} 条操作日志"}
