from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from healthlog.core.auto_backup import AutoBackupScheduler
from healthlog.core.backup import BackupManager
from healthlog.core.errors import (
    BackupNotFoundError,
    ConfigurationError,
    DefaultTemplateError,
    HealthLogError,
    InvalidSnapshotError,
    RestoreError,
    StoreUnavailableError,
    TemplateNotFoundError,
    UserNotFoundError,
)
from healthlog.models.user import User


def get_db(request: Request):
    factory = getattr(request.app.state, "session_factory", None)
    if factory is None:
        raise HTTPException(503, "DB not configured")
    db = factory()
    try:
        yield db
    finally:
        db.close()


def get_backup_manager(request: Request) -> BackupManager:
    manager = getattr(request.app.state, "backups", None)
    if manager is None:
        raise HTTPException(503, "DB not configured")
    return manager


def get_scheduler(request: Request) -> AutoBackupScheduler:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(503, "DB not configured")
    return scheduler


def require_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(404, f"User not found: {user_id}")
    return user


_STATUS = (
    ((UserNotFoundError, BackupNotFoundError, TemplateNotFoundError), 404),
    ((InvalidSnapshotError,), 400),
    ((DefaultTemplateError,), 409),
    ((StoreUnavailableError, ConfigurationError), 503),
    ((RestoreError,), 500),
)


def to_http(e: HealthLogError) -> HTTPException:
    for types, status in _STATUS:
        if isinstance(e, types):
            return HTTPException(status, str(e))
    return HTTPException(500, str(e))
