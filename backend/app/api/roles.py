"""
角色管理API
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional
from app.core.security import require_view
from app.db.database import get_db
from app.models.role import Role, View
from app.models.user import User
from app.schemas.role import RoleCreate, RoleUpdate, RoleResponse

router = APIRouter(prefix="/api/roles", tags=["角色管理"])


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Role).filter(func.lower(Role.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Role.id != exclude_id)
    return query.first() is not None


@router.get("", response_model=List[RoleResponse])
def get_roles(db: Session = Depends(get_db), _admin=Depends(require_view(View.ADMIN))):
    """获取角色列表"""
    return db.query(Role).order_by(Role.name.asc()).all()


@router.get("/{role_id}", response_model=RoleResponse)
def get_role(role_id: int, db: Session = Depends(get_db), _admin=Depends(require_view(View.ADMIN))):
    """获取角色详情"""
    role = db.query(Role).filter(Role.id == role_id).first()
    if not role:
        raise HTTPException(status_code=404, detail="角色不存在")
    return role


@router.post("", response_model=RoleResponse)
def create_role(
    role: RoleCreate,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """创建角色"""
    name = role.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="角色名称不能为空")
    if _name_taken(db, name):
        raise HTTPException(status_code=400, detail="角色名称已存在")

    db_role = Role(name=name)
    db_role.set_permissions(role.permissions)
    db.add(db_role)
    db.commit()
    db.refresh(db_role)
    return db_role


@router.put("/{role_id}", response_model=RoleResponse)
def update_role(
    role_id: int,
    role_update: RoleUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """更新角色名称或权限"""
    db_role = db.query(Role).filter(Role.id == role_id).first()
    if not db_role:
        raise HTTPException(status_code=404, detail="角色不存在")

    if role_update.name is not None:
        name = role_update.name.strip()
        if not name:
            raise HTTPException(status_code=400, detail="角色名称不能为空")
        if _name_taken(db, name, exclude_id=role_id):
            raise HTTPException(status_code=400, detail="角色名称已存在")
        db_role.name = name

    if role_update.permissions is not None:
        db_role.set_permissions(role_update.permissions)

    db.commit()
    db.refresh(db_role)
    return db_role


@router.delete("/{role_id}")
def delete_role(
    role_id: int,
    db: Session = Depends(get_db),
    _admin=Depends(require_view(View.ADMIN)),
):
    """删除角色（仍有用户使用时不允许删除）"""
    db_role = db.query(Role).filter(Role.id == role_id).first()
    if not db_role:
        raise HTTPException(status_code=404, detail="角色不存在")

    assigned = db.query(User).filter(User.role_id == role_id).count()
    if assigned:
        raise HTTPException(status_code=400, detail=f"还有 {assigned} 个用户使用该角色，无法删除")

    db.delete(db_role)
    db.commit()
    return {"message": "角色已删除"}
