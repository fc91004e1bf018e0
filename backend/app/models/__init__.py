"""
数据库模型
"""
from app.models.product import Product
from app.models.room import Room, RoomStock
from app.models.receipt import Receipt, ReceiptConsumedItem, ReceiptReplenishmentItem
from app.models.role import Role, RolePermission, View
from app.models.user import User
from app.models.system_config import SystemConfig
from app.models.operation_log import OperationLog

__all__ = [
    "Product",
    "Room",
    "RoomStock",
    "Receipt",
    "ReceiptConsumedItem",
    "ReceiptReplenishmentItem",
    "Role",
    "RolePermission",
    "View",
    "User",
    "SystemConfig",
    "OperationLog",
]
