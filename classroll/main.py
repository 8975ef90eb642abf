import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from classroll.api import admins, auth, catalog, sessions, presences, live
from classroll.core import errors
from classroll.core.config import settings
from classroll.db.init_db import create_tables, ensure_first_admin
from classroll.db.session import SessionLocal, engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    errors.ValidationError: 400,
    errors.NotFoundError: 404,
    errors.ConflictError: 400,
    errors.AuthorizationError: 403,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.CREATE_TABLES_ON_STARTUP:
        create_tables(engine)
    db = SessionLocal()
    try:
        ensure_first_admin(db)
    finally:
        db.close()
    logger.info("🚀 [App] classroll started")
    yield


app = FastAPI(title="classroll", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(errors.DomainError)
async def domain_error_handler(request: Request, exc: errors.DomainError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(status_code=status_code, content={"detail": exc.detail, "kind": exc.kind})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_errors(exc), "kind": errors.ValidationError.kind},
    )


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(admins.router, prefix="/api/admins", tags=["admins"])
app.include_router(catalog.router, prefix="/api", tags=["catalog"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
app.include_router(presences.router, prefix="/api/presences", tags=["presences"])
app.include_router(live.router, prefix="/ws", tags=["live"])
