"""
结账流程

前台提交某房间本次的消耗数量 -> 计算收据 -> 扣减库存并保存收据。
同一房间的结账在房间锁内完成，读取的库存一定是上一次结账提交后的结果。
"""
from dataclasses import dataclass
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from app.core.config import PERSIST_EMPTY_RECEIPTS, get_config_flag
from app.core.exceptions import RoomNotFound
from app.core.logging_config import get_logger
from app.models.receipt import Receipt
from app.models.room import Room
from app.services.catalog import load_catalog
from app.services.consumption_ledger import ConsumptionLedger
from app.services.receipt_builder import ReceiptDraft, build_receipt
from app.services.room_locks import room_lock
from app.services.stock_reconciler import reconcile

logger = get_logger(__name__)


@dataclass
class CheckoutResult:
    room: Room
    draft: ReceiptDraft
    receipt: Optional[Receipt]
    persisted: bool


def get_room_or_raise(db: Session, room_number: str) -> Room:
    room = db.query(Room).filter(Room.number == room_number).first()
    if room is None:
        raise RoomNotFound(room_number)
    return room


def _draft_for(db: Session, room: Room, consumption: Mapping[int, int]) -> ReceiptDraft:
    catalog = load_catalog(db)
    stock = catalog.normalize_stock(room.stock_map())
    ledger = ConsumptionLedger.from_mapping(stock, consumption, catalog=catalog, room_number=room.number)
    return build_receipt(stock, catalog, ledger.as_dict())


def preview_receipt(db: Session, room_number: str, consumption: Mapping[int, int]) -> ReceiptDraft:
    """只计算不保存"""
    room = get_room_or_raise(db, room_number)
    return _draft_for(db, room, consumption)


def checkout_room(
    db: Session,
    room_number: str,
    consumption: Mapping[int, int],
    operator: Optional[str] = None,
) -> CheckoutResult:
    """生成收据并扣减房间库存"""
    room = get_room_or_raise(db, room_number)
    with room_lock(room.id, room.number):
        # 丢弃会话中的旧数据，重新读取锁内的最新库存
        db.expire_all()
        room = get_room_or_raise(db, room_number)
        draft = _draft_for(db, room, consumption)

        if draft.is_empty and not get_config_flag(db, PERSIST_EMPTY_RECEIPTS):
            logger.info("empty receipt skipped", extra={"room_number": room_number})
            return CheckoutResult(room=room, draft=draft, receipt=None, persisted=False)

        receipt = reconcile(db, room, draft, operator=operator)
        return CheckoutResult(room=room, draft=draft, receipt=receipt, persisted=True)
