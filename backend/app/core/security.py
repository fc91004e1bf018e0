"""
认证与权限

用户名 + 4位口令登录，口令以bcrypt哈希保存。登录成功后签发访问令牌（保存在进程内存中），
每个接口通过 require_view 声明所需的视图权限。
"""
import secrets
import threading
from datetime import datetime
from typing import Dict, Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core import config
from app.core.exceptions import AuthenticationFailed, PermissionDenied
from app.db.database import get_db
from app.models.role import View
from app.models.user import User

security = HTTPBearer(auto_error=False)

# 简单的token存储 {token: {"user_id", "username", "created_at"}}
tokens: Dict[str, dict] = {}
_tokens_lock = threading.Lock()


def hash_passkey(passkey: str) -> str:
    """生成口令哈希"""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(passkey.encode("utf-8"), salt).decode("utf-8")


def verify_passkey(passkey: str, passkey_hash: str) -> bool:
    """验证口令"""
    try:
        return bcrypt.checkpw(passkey.encode("utf-8"), passkey_hash.encode("utf-8"))
    except ValueError:
        return False


def issue_token(user: User) -> str:
    token = secrets.token_urlsafe(32)
    with _tokens_lock:
        tokens[token] = {
            "user_id": user.id,
            "username": user.username,
            "created_at": datetime.now(),
        }
    return token


def revoke_token(token: Optional[str]) -> None:
    if not token:
        return
    with _tokens_lock:
        tokens.pop(token, None)


def revoke_user_tokens(user_id: int) -> None:
    """用户被删除时作废其所有令牌"""
    with _tokens_lock:
        for token in [t for t, data in tokens.items() if data["user_id"] == user_id]:
            del tokens[token]


def lookup_token(token: Optional[str]) -> Optional[dict]:
    if not token:
        return None
    with _tokens_lock:
        return tokens.get(token)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """从 Authorization: Bearer <token> 中解析当前用户"""
    data = lookup_token(credentials.credentials if credentials else None)
    if data is None:
        raise AuthenticationFailed("未登录或登录已过期")
    user = db.query(User).filter(User.id == data["user_id"]).first()
    if user is None:
        raise AuthenticationFailed("用户不存在")
    return user


def require_view(*views: View):
    """声明接口所需的视图权限；给出多个视图时拥有其中任意一个即可"""

    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role is None or not any(user.role.allows(view) for view in views):
            raise PermissionDenied(" / ".join(view.value for view in views))
        return user

    return dependency
