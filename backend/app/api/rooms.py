"""
房间管理API
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from typing import List, Optional
from app.core.exceptions import ConcurrentCheckout, ProductNotFound
from app.core.logging_config import get_logger
from app.core.security import require_view
from app.db.database import get_db
from app.models.role import View
from app.models.room import Room, RoomStock
from app.models.user import User
from app.schemas.receipt import CheckoutResponse, ReceiptDraftResponse, ReceiptResponse
from app.schemas.room import (
    RoomCreate, RoomUpdate, RoomResponse, StockUpdateRequest, ConsumptionRequest
)
from app.services.catalog import Catalog, load_catalog
from app.services.checkout import checkout_room, get_room_or_raise, preview_receipt
from app.services.room_locks import forget_room, room_lock
from app.services.stock_reconciler import write_room_stock

router = APIRouter(prefix="/api/rooms", tags=["房间管理"])
buildings_router = APIRouter(prefix="/api/buildings", tags=["房间管理"])

logger = get_logger(__name__)


def room_to_response(room: Room, catalog: Catalog) -> RoomResponse:
    """房间响应；库存补齐目录中的所有商品（缺失视为0）"""
    return RoomResponse(
        id=room.id,
        number=room.number,
        building=room.building,
        stock=catalog.normalize_stock(room.stock_map()),
        last_checkout_at=room.last_checkout_at,
        created_at=room.created_at,
        updated_at=room.updated_at,
    )


def _clean_number(number: str) -> str:
    number = number.strip()
    if not number:
        raise HTTPException(status_code=400, detail="房间号不能为空")
    return number


@router.get("", response_model=List[RoomResponse])
def get_rooms(
    building: Optional[int] = None,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.ROOMS, View.MANAGEMENT)),
):
    """获取房间列表"""
    query = db.query(Room)
    if building is not None:
        query = query.filter(Room.building == building)
    rooms = query.order_by(Room.number.asc()).all()
    catalog = load_catalog(db)
    return [room_to_response(room, catalog) for room in rooms]


@router.get("/{room_number}", response_model=RoomResponse)
def get_room(
    room_number: str,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.ROOMS, View.MANAGEMENT)),
):
    """获取房间详情"""
    room = get_room_or_raise(db, room_number)
    return room_to_response(room, load_catalog(db))


@router.post("", response_model=RoomResponse)
def create_room(
    room: RoomCreate,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.MANAGEMENT)),
):
    """创建房间，按所有商品的标准库存满配"""
    number = _clean_number(room.number)
    if db.query(Room).filter(Room.number == number).first():
        raise HTTPException(status_code=400, detail="房间号已存在")

    catalog = load_catalog(db)
    db_room = Room(number=number, building=room.building)
    for product_id, quantity in catalog.full_stock().items():
        db_room.stock_entries.append(RoomStock(product_id=product_id, quantity=quantity))
    db.add(db_room)
    db.commit()
    db.refresh(db_room)
    return room_to_response(db_room, catalog)


@router.put("/{room_number}", response_model=RoomResponse)
def update_room(
    room_number: str,
    request: RoomUpdate,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.MANAGEMENT)),
):
    """更新房间（改房间号或楼栋，库存保持不变）"""
    room = get_room_or_raise(db, room_number)

    # 检查新房间号是否重复
    if request.number is not None:
        new_number = _clean_number(request.number)
        if new_number != room.number:
            if db.query(Room).filter(Room.number == new_number).first():
                raise HTTPException(status_code=400, detail="房间号已存在")
            room.number = new_number

    if request.building is not None:
        room.building = request.building

    db.commit()
    db.refresh(room)
    return room_to_response(room, load_catalog(db))


@router.delete("/{room_number}")
def delete_room(
    room_number: str,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.MANAGEMENT)),
):
    """删除房间（历史收据保留房间号快照）"""
    room = get_room_or_raise(db, room_number)
    room_id = room.id
    db.delete(room)
    db.commit()
    forget_room(room_id)
    return {"message": f"房间 {room_number} 已删除"}


@router.put("/{room_number}/stock", response_model=RoomResponse)
def update_room_stock(
    room_number: str,
    request: StockUpdateRequest,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.ROOMS)),
):
    """手动设置库存（客房部补货后登记）"""
    room = get_room_or_raise(db, room_number)
    with room_lock(room.id, room.number):
        db.expire_all()
        room = get_room_or_raise(db, room_number)
        catalog = load_catalog(db)
        for product_id in request.stock:
            if product_id not in catalog:
                raise ProductNotFound(product_id)

        write_room_stock(db, room, request.stock)
        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            raise ConcurrentCheckout(room_number)

    db.refresh(room)
    logger.info("room stock written", extra={"room_number": room_number, "stock": request.stock})
    return room_to_response(room, catalog)


@router.post("/{room_number}/receipt-preview", response_model=ReceiptDraftResponse)
def preview_room_receipt(
    room_number: str,
    request: ConsumptionRequest,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.ROOMS)),
):
    """预览收据（不保存、不扣库存）"""
    draft = preview_receipt(db, room_number, request.consumption)
    return ReceiptDraftResponse.model_validate(draft)


@router.post("/{room_number}/checkout", response_model=CheckoutResponse)
def checkout(
    room_number: str,
    request: ConsumptionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_view(View.ROOMS)),
):
    """生成收据和补货清单，并扣减房间库存"""
    result = checkout_room(db, room_number, request.consumption, operator=user.username)
    catalog = load_catalog(db)
    return CheckoutResponse(
        persisted=result.persisted,
        receipt=ReceiptResponse.model_validate(result.receipt) if result.receipt else None,
        draft=ReceiptDraftResponse.model_validate(result.draft),
        room=room_to_response(result.room, catalog),
    )


@buildings_router.delete("/{building}")
def delete_building(
    building: int,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.MANAGEMENT)),
):
    """删除整栋楼的所有房间"""
    rooms = db.query(Room).filter(Room.building == building).all()
    if not rooms:
        raise HTTPException(status_code=404, detail="该楼栋没有房间")

    room_ids = [room.id for room in rooms]
    for room in rooms:
        db.delete(room)
    db.commit()
    for room_id in room_ids:
        forget_room(room_id)
    return {"message": f"{building} 号楼已删除", "deleted_count": len(room_ids)}
