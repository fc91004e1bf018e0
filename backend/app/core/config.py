"""
运行配置

进程级配置从环境变量读取；业务开关保存在 system_configs 表中，可在运行时修改。
"""
import os

from sqlalchemy.orm import Session

from app.models.system_config import SystemConfig


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# 数据库为空时是否写入演示数据
SEED_DEMO_DATA = _env_bool("SEED_DEMO_DATA", "true")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# bcrypt 计算轮数（测试环境可以调低）
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# 等待同一房间结账锁的最长秒数
CHECKOUT_LOCK_TIMEOUT = float(os.getenv("CHECKOUT_LOCK_TIMEOUT", "5"))


# system_configs 表中的业务配置键及默认值
PERSIST_EMPTY_RECEIPTS = "persist_empty_receipts"
CURRENCY_SYMBOL = "currency_symbol"

CONFIG_DEFAULTS = {
    PERSIST_EMPTY_RECEIPTS: "false",
    CURRENCY_SYMBOL: "$",
}


def get_config_value(db: Session, key: str) -> str:
    """读取业务配置，不存在时返回默认值"""
    config = db.query(SystemConfig).filter(SystemConfig.key == key).first()
    if config is None or config.value is None:
        return CONFIG_DEFAULTS.get(key, "")
    return config.value


def get_config_flag(db: Session, key: str) -> bool:
    return get_config_value(db, key).strip().lower() in ("1", "true", "yes", "on")
