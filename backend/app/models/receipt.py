"""
收据模型

收据只追加，不修改、不删除。明细中的商品名称和单价为生成时的快照，
不关联商品表，商品被删除或改价后历史收据保持不变。
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.db.database import Base


class Receipt(Base):
    """收据表"""
    __tablename__ = "receipts"

    id = Column(String(64), primary_key=True, comment="收据编号")
    room_number = Column(String(20), nullable=False, index=True, comment="房间号（快照）")
    building = Column(Integer, nullable=False, comment="楼栋（快照）")
    created_at = Column(DateTime(timezone=True), nullable=False, index=True, comment="生成时间")
    total_bill = Column(Numeric(10, 2), nullable=False, default=0, comment="账单总额")
    operator = Column(String(100), nullable=True, comment="操作员用户名")

    # 关系
    consumed_items = relationship(
        "ReceiptConsumedItem", back_populates="receipt",
        cascade="all, delete-orphan", order_by="ReceiptConsumedItem.position"
    )
    replenishment_items = relationship(
        "ReceiptReplenishmentItem", back_populates="receipt",
        cascade="all, delete-orphan", order_by="ReceiptReplenishmentItem.position"
    )

    __table_args__ = (
        Index("idx_receipts_room_number", "room_number"),
        Index("idx_receipts_created_at", "created_at"),
    )


class ReceiptConsumedItem(Base):
    """收据消费明细表"""
    __tablename__ = "receipt_consumed_items"

    id = Column(Integer, primary_key=True, index=True)
    receipt_id = Column(String(64), ForeignKey("receipts.id"), nullable=False, index=True, comment="收据编号")
    position = Column(Integer, nullable=False, default=0, comment="明细顺序")
    product_id = Column(Integer, nullable=False, comment="商品ID（不做外键）")
    product_name = Column(String(100), nullable=False, comment="商品名称（快照）")
    quantity = Column(Integer, nullable=False, comment="数量")
    price_per_unit = Column(Numeric(10, 2), nullable=False, comment="单价（快照）")
    line_total = Column(Numeric(10, 2), nullable=False, comment="小计")

    receipt = relationship("Receipt", back_populates="consumed_items")


class ReceiptReplenishmentItem(Base):
    """收据补货明细表"""
    __tablename__ = "receipt_replenishment_items"

    id = Column(Integer, primary_key=True, index=True)
    receipt_id = Column(String(64), ForeignKey("receipts.id"), nullable=False, index=True, comment="收据编号")
    position = Column(Integer, nullable=False, default=0, comment="明细顺序")
    product_id = Column(Integer, nullable=False, comment="商品ID（不做外键）")
    product_name = Column(String(100), nullable=False, comment="商品名称（快照）")
    quantity = Column(Integer, nullable=False, comment="需补数量")

    receipt = relationship("Receipt", back_populates="replenishment_items")
