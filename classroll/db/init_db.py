# classroll/db/init_db.py
import logging

from sqlalchemy.orm import Session

from classroll.core.config import settings
from classroll.crud import user as crud_user
from classroll.db.base import Base

logger = logging.getLogger(__name__)


def create_tables(engine) -> None:
    import classroll.db  # noqa: F401  registers models

    Base.metadata.create_all(bind=engine)


def ensure_first_admin(db: Session) -> None:
    if not (settings.FIRST_ADMIN_EMAIL and settings.FIRST_ADMIN_PASSWORD):
        return
    email = settings.FIRST_ADMIN_EMAIL.strip().lower()
    if crud_user.get_user_by_email(db, email):
        return
    crud_user.create_user(
        db,
        email=email,
        password=settings.FIRST_ADMIN_PASSWORD,
        full_name=settings.FIRST_ADMIN_NAME,
        role="admin",
    )
    logger.info(f"✅ [Init] First administrator {email} created")
