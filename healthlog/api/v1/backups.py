from datetime import date as DateType
from typing import Any

from fastapi import APIRouter, Body, Depends, Response
from pydantic import BaseModel

from healthlog.api.deps import get_backup_manager, get_scheduler, to_http
from healthlog.core.auto_backup import AutoBackupScheduler
from healthlog.core.backup import BackupManager, summarize
from healthlog.core.errors import HealthLogError
from healthlog.schemas.backup import BackupSummary, BackupType

router = APIRouter(prefix="/users/{user_id}/backups", tags=["backups"])


# ---------- Pydantic schemas ----------

class BackupCreateIn(BaseModel):
    backup_name: str | None = None
    backup_type: BackupType = BackupType.MANUAL


class AutomaticBackupOut(BaseModel):
    status: str  # created | skipped
    backup: BackupSummary | None = None


class AutoInitOut(BaseModel):
    scheduled: bool


class RestoreOut(BaseModel):
    status: str
    backup_id: str
    restored: dict[str, int]
    total: int


# ---------- Endpoints ----------

@router.post("", status_code=201, response_model=BackupSummary)
def create_backup(
    user_id: str,
    payload: BackupCreateIn | None = None,
    manager: BackupManager = Depends(get_backup_manager),
):
    payload = payload or BackupCreateIn()
    try:
        snapshot = manager.create_snapshot(user_id, payload.backup_name, payload.backup_type)
    except HealthLogError as e:
        raise to_http(e) from e
    return summarize(snapshot)


@router.get("", response_model=list[BackupSummary])
def list_backups(user_id: str, manager: BackupManager = Depends(get_backup_manager)):
    return manager.list_snapshots(user_id)


@router.post("/automatic", response_model=AutomaticBackupOut)
def create_automatic_backup(
    user_id: str,
    today: DateType | None = None,
    manager: BackupManager = Depends(get_backup_manager),
):
    try:
        snapshot = manager.create_automatic_snapshot(user_id, today)
    except HealthLogError as e:
        raise to_http(e) from e
    if snapshot is None:
        return AutomaticBackupOut(status="skipped")
    return AutomaticBackupOut(status="created", backup=summarize(snapshot))


@router.post("/auto-init", response_model=AutoInitOut)
def init_automatic_backup(user_id: str, scheduler: AutoBackupScheduler = Depends(get_scheduler)):
    """
    Called when the user opens the app: schedules today's automatic backup
    unless it already ran.
    """
    return AutoInitOut(scheduled=scheduler.initialize(user_id))


@router.post("/import", status_code=201, response_model=BackupSummary)
def import_backup(
    user_id: str,
    payload: dict[str, Any] = Body(...),
    manager: BackupManager = Depends(get_backup_manager),
):
    """
    Upload a file produced by the download endpoint. It becomes a new backup
    of this user; restore it separately.
    """
    try:
        snapshot = manager.import_snapshot(user_id, payload)
    except HealthLogError as e:
        raise to_http(e) from e
    return summarize(snapshot)


@router.post("/{backup_id}/restore", response_model=RestoreOut)
def restore_backup(user_id: str, backup_id: str, manager: BackupManager = Depends(get_backup_manager)):
    try:
        restored = manager.restore_snapshot(user_id, backup_id)
    except HealthLogError as e:
        raise to_http(e) from e
    return RestoreOut(status="ok", backup_id=backup_id, restored=restored, total=sum(restored.values()))


@router.delete("/{backup_id}")
def delete_backup(user_id: str, backup_id: str, manager: BackupManager = Depends(get_backup_manager)):
    manager.delete_snapshot(user_id, backup_id)
    return {"status": "ok", "deleted": backup_id}


@router.get("/{backup_id}/download")
def download_backup(user_id: str, backup_id: str, manager: BackupManager = Depends(get_backup_manager)):
    try:
        filename, content = manager.download_snapshot(user_id, backup_id)
    except HealthLogError as e:
        raise to_http(e) from e
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
