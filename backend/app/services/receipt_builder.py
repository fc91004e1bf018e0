"""
收据计算

根据房间现有库存、商品目录和本次消耗，计算：
  - 向客人收费的消费明细及总额
  - 需要客房部补货的明细（补到标准库存）

调用方需保证每个商品的消耗数量不超过现有库存（见 ConsumptionLedger）。
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Tuple

from app.services.catalog import Catalog, to_money


@dataclass(frozen=True)
class ConsumedLine:
    product_id: int
    product_name: str
    quantity: int
    price_per_unit: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class ReplenishmentLine:
    product_id: int
    product_name: str
    quantity: int


@dataclass(frozen=True)
class ReceiptDraft:
    """尚未保存的收据"""
    consumed_items: Tuple[ConsumedLine, ...]
    replenishment_items: Tuple[ReplenishmentLine, ...]
    total_bill: Decimal

    @property
    def is_empty(self) -> bool:
        return not self.consumed_items and not self.replenishment_items

    def consumed_quantities(self) -> dict:
        return {line.product_id: line.quantity for line in self.consumed_items}


def build_receipt(
    stock: Mapping[int, int],
    catalog: Catalog,
    consumption: Mapping[int, int],
) -> ReceiptDraft:
    """计算收据；明细顺序与目录顺序一致"""
    consumed_items = []
    replenishment_items = []
    total_bill = Decimal("0.00")

    for product in catalog:
        consumed = consumption.get(product.id, 0)
        if consumed > 0:
            line_total = to_money(product.price * consumed)
            consumed_items.append(
                ConsumedLine(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=consumed,
                    price_per_unit=product.price,
                    line_total=line_total,
                )
            )
            total_bill += line_total

        remaining = stock.get(product.id, 0) - consumed
        needed = product.standard_stock - remaining
        # 原本就低于标准库存时，即使本次没有消耗也需要补货
        if needed > 0:
            replenishment_items.append(
                ReplenishmentLine(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=needed,
                )
            )

    return ReceiptDraft(
        consumed_items=tuple(consumed_items),
        replenishment_items=tuple(replenishment_items),
        total_bill=to_money(total_bill),
    )
