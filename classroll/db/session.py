# classroll/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from classroll.core.config import settings


def make_engine(url, **engine_options):
    connect_args = {}
    if str(url).startswith("sqlite"):
        # Requests are served from FastAPI's threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True, **engine_options)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
