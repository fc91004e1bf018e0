"""
商品管理API
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from app.core.logging_config import get_logger
from app.core.security import require_view
from app.db.database import get_db
from app.models.product import Product
from app.models.role import View
from app.models.room import Room, RoomStock
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse

router = APIRouter(prefix="/api/products", tags=["商品管理"])

logger = get_logger(__name__)


@router.get("", response_model=List[ProductResponse])
def get_products(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.ROOMS, View.MANAGEMENT)),
):
    """获取商品列表（按名称排序）"""
    query = db.query(Product)
    if search:
        query = query.filter(Product.name.like(f"%{search}%"))
    return query.order_by(Product.name.asc(), Product.id.asc()).all()


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.ROOMS, View.MANAGEMENT)),
):
    """获取商品详情"""
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="商品不存在")
    return product


@router.post("", response_model=ProductResponse)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.MANAGEMENT)),
):
    """创建商品，所有房间按标准库存满配"""
    db_product = Product(**product.model_dump())
    db.add(db_product)
    db.flush()

    rooms = db.query(Room).all()
    for room in rooms:
        room.stock_entries.append(RoomStock(product_id=db_product.id, quantity=db_product.standard_stock))

    db.commit()
    db.refresh(db_product)
    logger.info("product created", extra={"product_id": db_product.id, "rooms_stocked": len(rooms)})
    return db_product


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_update: ProductUpdate,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.MANAGEMENT)),
):
    """更新商品（只影响之后生成的收据）"""
    db_product = db.query(Product).filter(Product.id == product_id).first()
    if not db_product:
        raise HTTPException(status_code=404, detail="商品不存在")

    update_data = product_update.model_dump(exclude_unset=True)
    for field in ("name", "price", "standard_stock"):
        if field in update_data and update_data[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} 不能为空")
    for field, value in update_data.items():
        setattr(db_product, field, value)

    db.commit()
    db.refresh(db_product)
    return db_product


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    _user=Depends(require_view(View.MANAGEMENT)),
):
    """删除商品，同时从所有房间库存中移除；历史收据不受影响"""
    db_product = db.query(Product).filter(Product.id == product_id).first()
    if not db_product:
        raise HTTPException(status_code=404, detail="商品不存在")

    removed = len(db_product.stock_entries)
    db.delete(db_product)
    db.commit()
    logger.info("product deleted", extra={"product_id": product_id, "stock_entries_removed": removed})
    return {"message": "商品已删除", "stock_entries_removed": removed}
