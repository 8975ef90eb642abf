# classroll/api/deps.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from classroll.core.security import decode_access_token
from classroll.crud import user as crud_user
from classroll.crud.catalog import SqlCatalog
from classroll.db.models.user import User
from classroll.db.session import SessionLocal
from classroll.services.notifications import Publisher, SessionHub, hub
from classroll.services.scheduler import Scheduler
from classroll.services.workflow import PresenceWorkflow

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_factory():
    return SessionLocal


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_publisher() -> Publisher:
    return hub


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise unauthorized
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise unauthorized
    email = payload.get("sub")
    if not email:
        raise unauthorized
    user = crud_user.get_user_by_email(db, email)
    if user is None:
        raise unauthorized
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Administrators only")
    return current_user


def require_teacher(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "teacher":
        raise HTTPException(status_code=403, detail="Teachers only")
    return current_user


def get_catalog(db: Session = Depends(get_db)) -> SqlCatalog:
    return SqlCatalog(db)


def get_scheduler(
    db: Session = Depends(get_db),
    catalog: SqlCatalog = Depends(get_catalog),
) -> Scheduler:
    return Scheduler(db, catalog)


def get_workflow(
    db: Session = Depends(get_db),
    catalog: SqlCatalog = Depends(get_catalog),
    publisher: Publisher = Depends(get_publisher),
) -> PresenceWorkflow:
    return PresenceWorkflow(db, catalog, publisher)


def get_hub() -> SessionHub:
    return hub
