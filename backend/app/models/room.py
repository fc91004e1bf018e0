"""
房间模型
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base


class Room(Base):
    """房间表"""
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(20), nullable=False, unique=True, index=True, comment="房间号，如 101")
    building = Column(Integer, nullable=False, index=True, comment="楼栋")
    version = Column(Integer, nullable=False, default=1, comment="版本号（乐观锁）")
    last_checkout_at = Column(DateTime(timezone=True), nullable=True, comment="最近一次结账时间")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    # 关系
    stock_entries = relationship(
        "RoomStock", back_populates="room", cascade="all, delete-orphan", order_by="RoomStock.product_id"
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_rooms_number", "number"),
        Index("idx_rooms_building", "building"),
        {"sqlite_autoincrement": True},
    )

    def stock_map(self) -> dict:
        """当前库存 {商品ID: 数量}"""
        return {entry.product_id: entry.quantity for entry in self.stock_entries}


class RoomStock(Base):
    """房间迷你吧库存表"""
    __tablename__ = "room_stocks"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True, comment="房间ID")
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True, comment="商品ID")
    quantity = Column(Integer, nullable=False, default=0, comment="现有数量")

    # 关系
    room = relationship("Room", back_populates="stock_entries")
    product = relationship("Product", back_populates="stock_entries")

    __table_args__ = (
        UniqueConstraint("room_id", "product_id", name="uq_room_stocks_room_product"),
        CheckConstraint("quantity >= 0", name="ck_room_stocks_quantity_non_negative"),
    )
