"""
业务配置管理API
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from app.core.config import CONFIG_DEFAULTS
from app.core.logging_config import get_logger
from app.core.security import require_view
from app.db.database import get_db
from app.models.role import View
from app.models.system_config import SystemConfig
from app.schemas.system_config import (
    SystemConfigCreate, SystemConfigUpdate, SystemConfigResponse
)

router = APIRouter(prefix="/api/system-configs", tags=["系统配置"])

logger = get_logger(__name__)


@router.get("", response_model=List[SystemConfigResponse])
def get_system_configs(db: Session = Depends(get_db), _admin=Depends(require_view(View.ADMIN))):
    """获取所有业务配置"""
    return db.query(SystemConfig).order_by(SystemConfig.key.asc()).all()


@router.get("/{config_key}", response_model=SystemConfigResponse)
def get_system_config(
    config_key: str,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """获取业务配置（如果不存在则返回默认值）"""
    config = db.query(SystemConfig).filter(SystemConfig.key == config_key).first()
    if not config:
        return SystemConfigResponse(
            id=0,  # 表示这是默认值
            key=config_key,
            value=CONFIG_DEFAULTS.get(config_key, ""),
            description="",
        )
    return config


@router.post("", response_model=SystemConfigResponse)
def create_system_config(
    config: SystemConfigCreate,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """创建业务配置"""
    existing = db.query(SystemConfig).filter(SystemConfig.key == config.key).first()
    if existing:
        raise HTTPException(status_code=400, detail="配置键已存在")

    db_config = SystemConfig(
        key=config.key,
        value=config.value,
        description=config.description
    )
    db.add(db_config)
    db.commit()
    db.refresh(db_config)
    logger.info("config created", extra={"key": config.key, "value": config.value})
    return db_config


@router.put("/{config_key}", response_model=SystemConfigResponse)
def update_system_config(
    config_key: str,
    config: SystemConfigUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """更新业务配置（如果不存在则创建）"""
    db_config = db.query(SystemConfig).filter(SystemConfig.key == config_key).first()
    if not db_config:
        db_config = SystemConfig(
            key=config_key,
            value=config.value if config.value is not None else CONFIG_DEFAULTS.get(config_key, ""),
            description=config.description
        )
        db.add(db_config)
    else:
        if config.value is not None:
            db_config.value = config.value
        if config.description is not None:
            db_config.description = config.description

    db.commit()
    db.refresh(db_config)
    logger.info("config updated", extra={"key": config_key, "value": db_config.value})
    return db_config
