from typing import Optional

from sqlalchemy.orm import Session

from classroll.core.security import get_password_hash
from classroll.db.models.user import User


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()


def get_teachers(db: Session):
    return db.query(User).filter(User.role == "teacher").order_by(User.full_name).all()


def get_admins(db: Session):
    return db.query(User).filter(User.role == "admin").order_by(User.full_name).all()


def count_admins(db: Session) -> int:
    return db.query(User).filter(User.role == "admin").count()


def create_user(
    db: Session,
    email: str,
    password: str,
    full_name: str,
    role: str,
    employee_id: Optional[str] = None,
):
    db_user = User(
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        full_name=full_name,
        role=role,
        employee_id=employee_id,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user(db: Session, db_user: User, changes: dict):
    for field, value in changes.items():
        if field == "password":
            db_user.hashed_password = get_password_hash(value)
        elif field == "email":
            db_user.email = value.strip().lower()
        else:
            setattr(db_user, field, value)
    db.commit()
    db.refresh(db_user)
    return db_user


def delete_user(db: Session, db_user: User):
    db.delete(db_user)
    db.commit()
