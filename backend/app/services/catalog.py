"""
商品目录快照

一次计费/对账过程中使用的只读商品列表。顺序即收据明细的顺序（按名称排序）。
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.product import Product

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """转换为两位小数的金额"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT)


@dataclass(frozen=True)
class CatalogItem:
    id: int
    name: str
    price: Decimal
    standard_stock: int


class Catalog:
    """有序、只读的商品目录"""

    def __init__(self, items: Iterable[CatalogItem] = ()):
        self._items: Tuple[CatalogItem, ...] = tuple(items)
        self._by_id: Dict[int, CatalogItem] = {item.id: item for item in self._items}

    @classmethod
    def from_products(cls, products: Iterable[Product]) -> "Catalog":
        return cls(
            CatalogItem(
                id=p.id,
                name=p.name,
                price=to_money(p.price),
                standard_stock=p.standard_stock,
            )
            for p in products
        )

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._by_id

    def get(self, product_id: int) -> Optional[CatalogItem]:
        return self._by_id.get(product_id)

    @property
    def ids(self) -> Tuple[int, ...]:
        return tuple(item.id for item in self._items)

    def full_stock(self) -> Dict[int, int]:
        """满配库存：每个商品取标准库存"""
        return {item.id: item.standard_stock for item in self._items}

    def normalize_stock(self, stock: Mapping[int, int]) -> Dict[int, int]:
        """补齐缺失商品（视为0），丢弃目录中已不存在的商品"""
        return {item.id: stock.get(item.id, 0) for item in self._items}


def load_catalog(db: Session) -> Catalog:
    """读取当前商品目录"""
    products = db.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()
    return Catalog.from_products(products)
