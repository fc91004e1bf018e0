"""
操作日志中间件
记录所有写操作（POST/PUT/PATCH/DELETE）
"""
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import SQLAlchemyError
from app.core.logging_config import get_logger
from app.core.security import lookup_token
from app.db.database import SessionLocal
from app.models.operation_log import OperationLog

logger = get_logger(__name__)


class OperationLogMiddleware(BaseHTTPMiddleware):
    """操作日志中间件"""

    LOGGED_METHODS = ("POST", "PUT", "PATCH", "DELETE")

    # 请求体包含口令，不记录
    BODY_EXCLUDED_PATHS = ("/login", "/api/users")

    # 模块映射：根据路径判断操作模块
    MODULE_MAP = {
        "/api/products": "商品管理",
        "/api/rooms": "房间管理",
        "/api/buildings": "房间管理",
        "/api/receipts": "收据查询",
        "/api/users": "用户管理",
        "/api/roles": "角色管理",
        "/api/system-configs": "系统配置",
        "/api/operation-logs": "操作日志",
        "/login": "认证",
        "/logout": "认证",
    }

    ACTION_MAP = {
        "POST": "创建",
        "PUT": "更新",
        "PATCH": "修改",
        "DELETE": "删除",
    }

    @classmethod
    def describe(cls, method: str, path: str):
        """根据方法和路径得到 (模块, 操作类型)"""
        module = "未知模块"
        for prefix, name in cls.MODULE_MAP.items():
            if path.startswith(prefix):
                module = name
                break

        action = cls.ACTION_MAP.get(method, method)
        if method == "POST":
            if path.endswith("/checkout"):
                action = "生成收据"
            elif path.endswith("/receipt-preview"):
                action = "预览收据"
            elif path == "/login":
                action = "登录"
            elif path == "/logout":
                action = "退出登录"
        elif method == "PUT" and path.endswith("/stock"):
            action = "调整库存"
        return module, action

    async def dispatch(self, request: Request, call_next):
        """处理请求并记录日志"""
        method = request.method
        if method not in self.LOGGED_METHODS:
            return await call_next(request)

        start_time = time.time()
        path = request.url.path

        # 从token中取用户
        username = "未知用户"
        user_id = None
        auth_header = request.headers.get("authorization", "")
        if auth_header.lower().startswith("bearer "):
            data = lookup_token(auth_header[7:].strip())
            if data:
                username = data["username"]
                user_id = data["user_id"]

        request_data = None
        if method != "DELETE" and not path.startswith(self.BODY_EXCLUDED_PATHS):
            body = await request.body()
            if body:
                request_data = body.decode("utf-8", errors="replace")[:2000]  # 限制长度

        response = await call_next(request)

        execution_time = int((time.time() - start_time) * 1000)
        status_code = response.status_code
        error_message = f"HTTP {status_code} 错误" if status_code >= 400 else None
        module, action = self.describe(method, path)

        db = SessionLocal()
        try:
            db.add(OperationLog(
                user_id=user_id,
                username=username,
                action=action,
                module=module,
                method=method,
                path=path,
                ip_address=request.client.host if request.client else None,
                request_data=request_data,
                status_code=status_code,
                error_message=error_message,
                execution_time=execution_time,
            ))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("failed to write operation log", extra={"path": path})
        finally:
            db.close()

        return response
