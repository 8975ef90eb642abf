# classroll/api/admins.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from classroll.api.deps import get_db, require_admin
from classroll.core import errors
from classroll.crud import user as crud_user
from classroll.db.models.user import User
from classroll.schemas.user import AdminCreate, AdminUpdate, UserOut

logger = logging.getLogger(__name__)

router = APIRouter()


def _admin(db: Session, admin_id: int) -> User:
    admin = crud_user.get_user_by_id(db, admin_id)
    if admin is None or admin.role != "admin":
        raise HTTPException(status_code=404, detail=f"Administrator {admin_id} not found")
    return admin


@router.post("", response_model=UserOut, status_code=201)
def create_admin(
    admin_in: AdminCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if crud_user.get_user_by_email(db, admin_in.email.strip().lower()):
        raise errors.ConflictError("Email already registered")
    admin = crud_user.create_user(
        db,
        email=admin_in.email,
        password=admin_in.password,
        full_name=admin_in.full_name,
        role="admin",
    )
    logger.info(f"✅ [Admins] {current_user.email} created administrator {admin.email}")
    return admin


@router.get("", response_model=List[UserOut])
def read_admins(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    return crud_user.get_admins(db)


@router.get("/{admin_id}", response_model=UserOut)
def read_admin(admin_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    return _admin(db, admin_id)


@router.put("/{admin_id}", response_model=UserOut)
def update_admin(
    admin_id: int,
    admin_in: AdminUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    admin = _admin(db, admin_id)
    changes = admin_in.model_dump(exclude_none=True)
    if "email" in changes:
        existing = crud_user.get_user_by_email(db, changes["email"].strip().lower())
        if existing is not None and existing.id != admin.id:
            raise errors.ConflictError("Email already registered")
    return crud_user.update_user(db, admin, changes)


@router.delete("/{admin_id}")
def delete_admin(admin_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    admin = _admin(db, admin_id)
    if admin.id == current_user.id:
        raise errors.ConflictError("You cannot delete your own administrator account")
    if crud_user.count_admins(db) <= 1:
        raise errors.ConflictError("The last administrator cannot be deleted")
    crud_user.delete_user(db, admin)
    logger.info(f"🗑️ [Admins] {current_user.email} deleted administrator {admin_id}")
    return {"message": "Administrator deleted"}
