"""
库存对账

把收据中的消耗数量从房间库存中扣除，并与收据在同一个事务中提交：
要么收据和库存同时生效，要么都不生效。补货由客房部线下完成，这里只扣减，不自动补满。
"""
from datetime import datetime, timezone
from typing import Dict, Iterable, Mapping, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import (
    ConcurrentCheckout, ReconciliationFailure, StockUnderflow, ValidationFailed
)
from app.core.logging_config import get_logger
from app.models.receipt import Receipt, ReceiptConsumedItem, ReceiptReplenishmentItem
from app.models.room import Room, RoomStock
from app.services.receipt_builder import ConsumedLine, ReceiptDraft

logger = get_logger(__name__)


def reconcile_stock(
    stock: Mapping[int, int],
    consumed_items: Iterable[ConsumedLine],
    room_number: Optional[str] = None,
) -> Dict[int, int]:
    """计算扣减后的库存；任何一项会变为负数时拒绝"""
    new_stock = dict(stock)
    for line in consumed_items:
        available = new_stock.get(line.product_id, 0)
        if line.quantity > available:
            raise StockUnderflow(line.product_id, available, line.quantity, room_number=room_number)
        new_stock[line.product_id] = available - line.quantity
    return new_stock


def write_room_stock(db: Session, room: Room, new_stock: Mapping[int, int]) -> None:
    """写入房间库存（不提交）；未列出的商品保持不变"""
    entries = {entry.product_id: entry for entry in room.stock_entries}
    for product_id, quantity in new_stock.items():
        if quantity < 0:
            raise ValidationFailed(f"房间 {room.number} 商品 {product_id} 的库存不能为负数")
        entry = entries.get(product_id)
        if entry is None:
            room.stock_entries.append(RoomStock(product_id=product_id, quantity=quantity))
        else:
            entry.quantity = quantity
    # 更新房间行本身，使版本号检查生效
    room.updated_at = datetime.now(timezone.utc)


def new_receipt_id(room_number: str, now: datetime) -> str:
    return f"R{now:%Y%m%d%H%M%S}-{room_number}-{uuid4().hex[:8]}"


def append_receipt(
    db: Session,
    room: Room,
    draft: ReceiptDraft,
    operator: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Receipt:
    """追加收据记录（不提交）"""
    now = now or datetime.now(timezone.utc)
    receipt = Receipt(
        id=new_receipt_id(room.number, now),
        room_number=room.number,
        building=room.building,
        created_at=now,
        total_bill=draft.total_bill,
        operator=operator,
    )
    for position, line in enumerate(draft.consumed_items):
        receipt.consumed_items.append(
            ReceiptConsumedItem(
                position=position,
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                price_per_unit=line.price_per_unit,
                line_total=line.line_total,
            )
        )
    for position, line in enumerate(draft.replenishment_items):
        receipt.replenishment_items.append(
            ReceiptReplenishmentItem(
                position=position,
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
            )
        )
    db.add(receipt)
    return receipt


def reconcile(
    db: Session,
    room: Room,
    draft: ReceiptDraft,
    operator: Optional[str] = None,
) -> Receipt:
    """扣减库存并保存收据，两者在同一事务中提交"""
    room_number = room.number
    new_stock = reconcile_stock(room.stock_map(), draft.consumed_items, room_number=room_number)
    changed = {pid: new_stock[pid] for pid in draft.consumed_quantities()}

    now = datetime.now(timezone.utc)
    try:
        write_room_stock(db, room, changed)
        room.last_checkout_at = now
        receipt = append_receipt(db, room, draft, operator=operator, now=now)
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("checkout conflict", extra={"room_number": room_number})
        raise ConcurrentCheckout(room_number)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("checkout write failed", extra={"room_number": room_number})
        raise ReconciliationFailure(room_number, str(exc.__class__.__name__))

    db.refresh(receipt)
    logger.info(
        "receipt created",
        extra={
            "receipt_id": receipt.id,
            "room_number": room_number,
            "total_bill": draft.total_bill,
            "consumed_units": sum(draft.consumed_quantities().values()),
        },
    )
    return receipt
