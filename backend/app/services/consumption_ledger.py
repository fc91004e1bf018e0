"""
消耗登记

前台逐个商品登记本次查房的消耗数量。登记时就保证数量不超过房间现有库存、不小于0，
收据计算时不再重复校验。
"""
from typing import Dict, Mapping, Optional

from app.core.exceptions import ProductNotFound, StockUnderflow, ValidationFailed
from app.services.catalog import Catalog


class ConsumptionLedger:
    """一次查房的消耗数量 {商品ID: 数量}"""

    def __init__(self, stock: Mapping[int, int], room_number: Optional[str] = None):
        self._stock = dict(stock)
        self._counts: Dict[int, int] = {}
        self.room_number = room_number

    @classmethod
    def from_mapping(
        cls,
        stock: Mapping[int, int],
        consumption: Mapping[int, int],
        catalog: Optional[Catalog] = None,
        room_number: Optional[str] = None,
    ) -> "ConsumptionLedger":
        """根据请求中的消耗表构建，逐项校验"""
        ledger = cls(stock, room_number=room_number)
        for product_id, quantity in consumption.items():
            if catalog is not None and product_id not in catalog:
                raise ProductNotFound(product_id)
            ledger.set(product_id, quantity)
        return ledger

    def available(self, product_id: int) -> int:
        return self._stock.get(product_id, 0)

    def consumed(self, product_id: int) -> int:
        return self._counts.get(product_id, 0)

    def remaining(self, product_id: int) -> int:
        """扣除本次消耗后的剩余数量"""
        return self.available(product_id) - self.consumed(product_id)

    def increment(self, product_id: int) -> int:
        current = self.consumed(product_id)
        if current >= self.available(product_id):
            raise StockUnderflow(
                product_id, self.available(product_id), current + 1, room_number=self.room_number
            )
        self._counts[product_id] = current + 1
        return current + 1

    def decrement(self, product_id: int) -> int:
        current = self.consumed(product_id)
        if current <= 0:
            raise ValidationFailed(f"商品 {product_id} 的消耗数量已为0，不能再减少")
        self._counts[product_id] = current - 1
        return current - 1

    def set(self, product_id: int, quantity: int) -> None:
        if quantity < 0:
            raise ValidationFailed(f"商品 {product_id} 的消耗数量不能为负数")
        if quantity > self.available(product_id):
            raise StockUnderflow(
                product_id, self.available(product_id), quantity, room_number=self.room_number
            )
        self._counts[product_id] = quantity

    def total_units(self) -> int:
        return sum(self._counts.values())

    def as_dict(self) -> Dict[int, int]:
        """非零的消耗项"""
        return {pid: qty for pid, qty in self._counts.items() if qty > 0}
