"""
商品模型
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base


class Product(Base):
    """商品表"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True, comment="名称")
    price = Column(Numeric(10, 2), nullable=False, comment="单价")
    standard_stock = Column(Integer, nullable=False, default=0, comment="标准库存（每个房间满配数量）")
    image_ref = Column(String(500), nullable=True, comment="图片引用")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    # 关系：删除商品时同时删除所有房间中的库存条目
    stock_entries = relationship("RoomStock", back_populates="product", cascade="all, delete")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("standard_stock >= 0", name="ck_products_standard_stock_non_negative"),
        Index("idx_products_name", "name"),
        {"sqlite_autoincrement": True},  # 商品ID不复用
    )
