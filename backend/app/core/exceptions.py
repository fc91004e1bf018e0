"""
领域异常

所有业务异常都继承自 MinibarError，并带有机器可读的 code 和对应的 HTTP 状态码。
路由层不需要逐个捕获，main.py 中注册的异常处理器会统一转换为JSON响应。

    MinibarError
    +-- NotFound
    |   +-- RoomNotFound
    |   +-- ProductNotFound
    +-- StockUnderflow
    +-- ReconciliationFailure
    |   +-- ConcurrentCheckout
    +-- ValidationFailed
    +-- AuthenticationFailed
    +-- PermissionDenied
"""
from typing import Any, Dict, Optional


class MinibarError(Exception):
    """迷你吧系统异常基类"""

    code: str = "MINIBAR_ERROR"
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为响应体（包含异常上的结构化字段）"""
        payload: Dict[str, Any] = {"detail": self.message, "code": self.code}
        for key, value in vars(self).items():
            if key.startswith("_") or key == "message":
                continue
            payload[key] = value
        return payload


class NotFound(MinibarError):
    """引用的记录不存在"""

    code = "NOT_FOUND"
    status_code = 404


class RoomNotFound(NotFound):
    code = "ROOM_NOT_FOUND"

    def __init__(self, room_number: str):
        self.room_number = room_number
        super().__init__(f"房间 {room_number} 不存在")


class ProductNotFound(NotFound):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"商品 {product_id} 不存在")


class StockUnderflow(MinibarError):
    """消耗数量超过房间现有库存（或会导致库存为负）"""

    code = "STOCK_UNDERFLOW"
    status_code = 409

    def __init__(
        self,
        product_id: int,
        available: int,
        requested: int,
        room_number: Optional[str] = None,
    ):
        self.room_number = room_number
        self.product_id = product_id
        self.available = available
        self.requested = requested
        where = f"房间 {room_number} " if room_number else ""
        super().__init__(
            f"{where}商品 {product_id} 库存不足：现有 {available}，请求 {requested}"
        )


class ReconciliationFailure(MinibarError):
    """收据与库存的写入失败，两者都未生效"""

    code = "RECONCILIATION_FAILURE"
    status_code = 500

    def __init__(self, room_number: str, reason: str):
        self.room_number = room_number
        self.reason = reason
        super().__init__(f"房间 {room_number} 结账写入失败，已回滚：{reason}")


class ConcurrentCheckout(ReconciliationFailure):
    """同一房间的另一笔结账已先行修改库存，需要重试"""

    code = "CONCURRENT_CHECKOUT"
    status_code = 409

    def __init__(self, room_number: str):
        super().__init__(room_number, "房间库存已被其他操作修改，请刷新后重试")


class ValidationFailed(MinibarError):
    """业务规则校验失败"""

    code = "VALIDATION_FAILED"
    status_code = 400


class AuthenticationFailed(MinibarError):
    code = "AUTHENTICATION_FAILED"
    status_code = 401


class PermissionDenied(MinibarError):
    code = "PERMISSION_DENIED"
    status_code = 403

    def __init__(self, view: str):
        self.view = view
        super().__init__(f"当前角色没有访问 {view} 的权限")
