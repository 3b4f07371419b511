from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from escola import models
from escola.core.config import settings
from escola.core.errors import EscolaError
from escola.core.logging import get_logger, setup_logging
from escola.db.base import Base
from escola.db.session import SessionLocal, engine
from escola.services.notifications import DEFAULT_NOTIFICATIONS, NotificationCenter

from escola.api.routes.auth import router as auth_router
from escola.api.routes.calendar import router as calendar_router
from escola.api.routes.classes import router as classes_router
from escola.api.routes.grades import router as grades_router
from escola.api.routes.notifications import router as notifications_router
from escola.api.routes.schedules import router as schedules_router
from escola.api.routes.students import router as students_router
from escola.api.routes.subjects import router as subjects_router
from escola.api.routes.teachers import router as teachers_router
from escola.api.routes.users import router as users_router

setup_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)

app = FastAPI(title="Gestao Escolar API", version="0.1.0")

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(students_router)
app.include_router(teachers_router)
app.include_router(classes_router)
app.include_router(subjects_router)
app.include_router(schedules_router)
app.include_router(grades_router)
app.include_router(calendar_router)
app.include_router(notifications_router)


@app.exception_handler(EscolaError)
def handle_domain_error(request: Request, exc: EscolaError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(IntegrityError)
def handle_integrity_error(request: Request, exc: IntegrityError):
    logger.warning("integrity_error", path=request.url.path, error=str(exc.orig))
    return JSONResponse(status_code=409, content={"detail": "conflicts with existing data"})


@app.exception_handler(SQLAlchemyError)
def handle_storage_error(request: Request, exc: SQLAlchemyError):
    logger.error("storage_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": "storage unavailable"})


@app.on_event("startup")
def bootstrap():
    Base.metadata.create_all(bind=engine)
    logger.info("tables_ready", tables=len(models.__all__))

    app.state.notifications = NotificationCenter(DEFAULT_NOTIFICATIONS)

    username = settings.LOGIN_USERNAME.strip()
    if not username:
        return

    db = SessionLocal()
    try:
        u = db.execute(select(models.User).where(models.User.username == username)).scalar_one_or_none()
        if not u:
            db.add(models.User(username=username, role="admin"))
            db.commit()
            logger.info("bootstrap_user_created", username=username)
        else:
            logger.info("bootstrap_user_ok", username=username)
    finally:
        db.close()


@app.get("/health")
def health():
    return {"status": "ok"}
