"""
认证相关API
"""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationFailed
from app.core.logging_config import get_logger
from app.core.security import (
    get_current_user, issue_token, revoke_token, security, verify_passkey
)
from app.db.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginResponse, UserInfoResponse

router = APIRouter(prefix="", tags=["认证"])  # 不使用/api前缀，前端直接调用/login

logger = get_logger(__name__)


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    用户登录
    用户名不区分大小写；登录后默认进入角色的第一个视图
    """
    username = request.username.strip()
    user = db.query(User).filter(func.lower(User.username) == username.lower()).first()
    if user is None or not verify_passkey(request.passkey, user.passkey_hash):
        logger.warning("login failed", extra={"username": username})
        raise AuthenticationFailed("用户名或口令错误")

    permissions = user.role.permissions if user.role else []
    token = issue_token(user)
    logger.info("login", extra={"username": user.username})
    return LoginResponse(
        accessToken=token,
        username=user.username,
        role=user.role.name if user.role else "",
        permissions=permissions,
        defaultView=permissions[0] if permissions else None,
    )


@router.post("/logout")
def logout(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """退出登录"""
    revoke_token(credentials.credentials if credentials else None)
    return {"message": "已退出登录"}


@router.get("/me", response_model=UserInfoResponse)
def get_user_info(user: User = Depends(get_current_user)):
    """获取当前用户信息"""
    return UserInfoResponse(
        id=user.id,
        username=user.username,
        role=user.role.name if user.role else "",
        permissions=user.role.permissions if user.role else [],
    )
