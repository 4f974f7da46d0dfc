import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable

import uvicorn
from fastapi import FastAPI
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from healthlog.core import db
from healthlog.core.auto_backup import AutoBackupScheduler
from healthlog.core.backup import BackupManager
from healthlog.core.config import settings
from healthlog.core.db import Base, utcnow
from healthlog.core.errors import ConfigurationError
from healthlog.core.logging_config import setup_logging
from healthlog.core.records import RecordStore
from healthlog.core.schema import SchemaInspector
from healthlog.core.snapshot_store import SnapshotStore, build_snapshot_store
from healthlog.api.v1.health import router as health_router
from healthlog.api.v1.backups import router as backups_router
from healthlog.api.v1.reports import router as reports_router
from healthlog.api.v1.heartburn import router as heartburn_router
from healthlog.api.v1.nutrition import router as nutrition_router
from healthlog.api.v1.exports import router as exports_router

logger = logging.getLogger(__name__)


def attach_services(
    app: FastAPI,
    engine: Engine,
    session_factory: sessionmaker,
    store: SnapshotStore | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> None:
    store = store or build_snapshot_store(settings, session_factory)
    manager = BackupManager(
        session_factory,
        RecordStore(SchemaInspector(engine)),
        store,
        retention=settings.BACKUP_RETENTION,
        clock=clock,
    )
    app.state.session_factory = session_factory
    app.state.backups = manager
    app.state.scheduler = AutoBackupScheduler(manager, store, settings.AUTO_BACKUP_DELAY_SECONDS)
    logger.info("Snapshot storage: %s, retention %d", store.kind, manager.retention)


def create_app(
    engine: Engine | None = None,
    session_factory: sessionmaker | None = None,
    store: SnapshotStore | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL)

        bind = engine or db.engine
        factory = session_factory or db.SessionLocal
        if bind is None or factory is None:
            raise ConfigurationError("POSTGRES_DSN is not set; refusing to start")

        Base.metadata.create_all(bind=bind)
        attach_services(app, bind, factory, store=store, clock=clock)
        try:
            yield
        finally:
            app.state.scheduler.shutdown()

    app = FastAPI(title="HealthLog", version="1.0.0", lifespan=lifespan)

    app.include_router(health_router, prefix="/v1")
    app.include_router(backups_router, prefix="/v1")
    app.include_router(reports_router, prefix="/v1")
    app.include_router(heartburn_router, prefix="/v1")
    app.include_router(nutrition_router, prefix="/v1")
    app.include_router(exports_router, prefix="/v1")
    return app


app = create_app()


def run() -> None:
    uvicorn.run("healthlog.main:app", host=settings.HOST, port=settings.PORT)
