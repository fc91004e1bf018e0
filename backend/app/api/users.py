"""
用户管理API
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional
from app.core.security import hash_passkey, require_view, revoke_user_tokens
from app.db.database import get_db
from app.models.role import Role, View
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate, UserResponse

router = APIRouter(prefix="/api/users", tags=["用户管理"])


def _username_taken(db: Session, username: str, exclude_id: Optional[int] = None) -> bool:
    """用户名不区分大小写唯一"""
    query = db.query(User).filter(func.lower(User.username) == username.lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def _ensure_role(db: Session, role_id: int) -> None:
    if not db.query(Role).filter(Role.id == role_id).first():
        raise HTTPException(status_code=400, detail="角色不存在")


@router.get("", response_model=List[UserResponse])
def get_users(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """获取用户列表"""
    query = db.query(User)
    if search:
        query = query.filter(User.username.like(f"%{search}%"))
    return query.order_by(User.username.asc()).all()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """获取用户详情"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="用户不存在")
    return user


@router.post("", response_model=UserResponse)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """创建用户"""
    username = user.username.strip()
    if not username:
        raise HTTPException(status_code=400, detail="用户名不能为空")
    if _username_taken(db, username):
        raise HTTPException(status_code=400, detail="用户名已存在")
    _ensure_role(db, user.role_id)

    db_user = User(
        username=username,
        passkey_hash=hash_passkey(user.passkey),
        role_id=user.role_id,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """更新用户（口令留空则不修改）"""
    db_user = db.query(User).filter(User.id == user_id).first()
    if not db_user:
        raise HTTPException(status_code=404, detail="用户不存在")

    if user_update.username is not None:
        username = user_update.username.strip()
        if not username:
            raise HTTPException(status_code=400, detail="用户名不能为空")
        if _username_taken(db, username, exclude_id=user_id):
            raise HTTPException(status_code=400, detail="用户名已存在")
        db_user.username = username

    if user_update.role_id is not None:
        _ensure_role(db, user_update.role_id)
        db_user.role_id = user_update.role_id

    if user_update.passkey:
        db_user.passkey_hash = hash_passkey(user_update.passkey)

    db.commit()
    db.refresh(db_user)
    return db_user


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_view(View.ADMIN)),
):
    """删除用户（不能删除自己）"""
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="不能删除当前登录的用户")
    db_user = db.query(User).filter(User.id == user_id).first()
    if not db_user:
        raise HTTPException(status_code=404, detail="用户不存在")

    db.delete(db_user)
    db.commit()
    revoke_user_tokens(user_id)
    return {"message": "用户删除成功"}
