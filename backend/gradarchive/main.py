"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gradarchive.config import settings
from gradarchive.db.engine import async_session, engine
from gradarchive.db.models import Base

# Routers
from gradarchive.api.colleges import router as colleges_router
from gradarchive.api.departments import router as departments_router
from gradarchive.api.supervisors import router as supervisors_router
from gradarchive.api.students import router as students_router
from gradarchive.api.projects import router as projects_router
from gradarchive.api.permissions import router as permissions_router
from gradarchive.api.users import router as users_router
from gradarchive.api.handlers import register_exception_handlers

from gradarchive.utils.logger import setup_logger
setup_logger(
    log_format=settings.LOG_FORMAT,
    log_level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR,
)
logger = logging.getLogger("gradarchive")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    # else: for PostgreSQL, run `alembic upgrade head` before starting the server

    # Seed the bootstrap administrator when its username is free
    try:
        from gradarchive.services.user_service import ensure_default_admin

        async with async_session() as db:
            await ensure_default_admin(db)
    except Exception as exc:
        logger.warning("Auto-seed admin failed: %s", exc)

    logger.info("Application startup complete (db=%s)", settings.DB_DIALECT)
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Database engine disposed")


app = FastAPI(
    title="gradarchive",
    description="Graduation-project archive for university departments",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

register_exception_handlers(app)

# Mount routers
app.include_router(colleges_router, prefix="/colleges")
app.include_router(departments_router, prefix="/departments")
app.include_router(supervisors_router, prefix="/supervisors")
app.include_router(students_router, prefix="/students")
app.include_router(projects_router, prefix="/projects")
app.include_router(permissions_router, prefix="/permissions")
app.include_router(users_router, prefix="/users")


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("gradarchive.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
