"""
FastAPI主应用入口
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core import config
from app.core.exceptions import MinibarError
from app.core.logging_config import configure_logging, get_logger
from app.db.init_db import init_db
from app.middleware.operation_log import OperationLogMiddleware

configure_logging(config.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # 创建数据库表，按需写入演示数据
    init_db(seed=config.SEED_DEMO_DATA)
    yield


# 创建FastAPI应用
app = FastAPI(
    title="客房迷你吧管理系统API",
    description="迷你吧消耗登记、收据生成与补货管理后端API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(OperationLogMiddleware)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MinibarError)
async def minibar_error_handler(request: Request, exc: MinibarError):
    """业务异常统一转换为JSON"""
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"path": request.url.path, "code": exc.code})
    else:
        logger.info(exc.message, extra={"path": request.url.path, "code": exc.code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# 全局异常处理
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """未处理的异常返回500，详细信息只写入日志"""
    logger.exception("unhandled exception", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content={"detail": "内部服务器错误", "code": "INTERNAL_ERROR"},
    )


@app.get("/")
async def root():
    """根路径"""
    return {"message": "客房迷你吧管理系统API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "ok"}


# 注册API路由
from app.api import (  # noqa: E402
    auth, products, rooms, receipts, statistics, users, roles, system_configs, operation_logs
)
app.include_router(auth.router)
app.include_router(products.router)
app.include_router(rooms.router)
app.include_router(rooms.buildings_router)
app.include_router(receipts.router)
app.include_router(statistics.router)
app.include_router(users.router)
app.include_router(roles.router)
app.include_router(system_configs.router)
app.include_router(operation_logs.router)
