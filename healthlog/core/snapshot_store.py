"""
Key-value storage for backup snapshots.

Full payloads are addressed by ``(user_id, snapshot_id)``; the ordered summary
list and the automatic-backup marker by ``user_id``. Writes to different keys
are independent: there is no transaction spanning a payload and the list.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date as DateType
from pathlib import Path

from pydantic import TypeAdapter
from sqlalchemy.orm import Session, sessionmaker

from healthlog.core.config import Settings
from healthlog.core.errors import ConfigurationError
from healthlog.models.backup import AutoBackupMarker, BackupSnapshotRecord, BackupSummaryList
from healthlog.schemas.backup import BackupSnapshot, BackupSummary

logger = logging.getLogger(__name__)

_summary_list = TypeAdapter(list[BackupSummary])


class SnapshotStore(ABC):
    kind = "abstract"

    @abstractmethod
    def get_snapshot(self, user_id: str, snapshot_id: str) -> BackupSnapshot | None: ...

    @abstractmethod
    def put_snapshot(self, snapshot: BackupSnapshot) -> None: ...

    @abstractmethod
    def delete_snapshot(self, user_id: str, snapshot_id: str) -> None: ...

    @abstractmethod
    def get_summaries(self, user_id: str) -> list[BackupSummary]: ...

    @abstractmethod
    def put_summaries(self, user_id: str, summaries: list[BackupSummary]) -> None: ...

    @abstractmethod
    def get_auto_backup_marker(self, user_id: str) -> str | None: ...

    @abstractmethod
    def set_auto_backup_marker(self, user_id: str, day: DateType) -> None: ...


class InMemorySnapshotStore(SnapshotStore):
    kind = "memory"

    def __init__(self):
        self.snapshots: dict[tuple[str, str], str] = {}
        self.summaries: dict[str, str] = {}
        self.markers: dict[str, str] = {}

    # Values are kept serialized so callers never share mutable state with the store.
    def get_snapshot(self, user_id, snapshot_id):
        raw = self.snapshots.get((user_id, snapshot_id))
        return BackupSnapshot.model_validate_json(raw) if raw is not None else None

    def put_snapshot(self, snapshot):
        self.snapshots[(snapshot.user_id, snapshot.id)] = snapshot.model_dump_json()

    def delete_snapshot(self, user_id, snapshot_id):
        self.snapshots.pop((user_id, snapshot_id), None)

    def get_summaries(self, user_id):
        raw = self.summaries.get(user_id)
        return _summary_list.validate_json(raw) if raw is not None else []

    def put_summaries(self, user_id, summaries):
        self.summaries[user_id] = _summary_list.dump_json(summaries).decode("utf-8")

    def get_auto_backup_marker(self, user_id):
        return self.markers.get(user_id)

    def set_auto_backup_marker(self, user_id, day):
        self.markers[user_id] = day.isoformat()


class DatabaseSnapshotStore(SnapshotStore):
    kind = "database"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get_snapshot(self, user_id, snapshot_id):
        db: Session = self._session_factory()
        try:
            row = db.get(BackupSnapshotRecord, (user_id, snapshot_id))
            return BackupSnapshot.model_validate(row.payload) if row else None
        finally:
            db.close()

    def put_snapshot(self, snapshot):
        db: Session = self._session_factory()
        try:
            db.merge(
                BackupSnapshotRecord(
                    user_id=snapshot.user_id,
                    id=snapshot.id,
                    payload=snapshot.model_dump(mode="json"),
                )
            )
            db.commit()
        finally:
            db.close()

    def delete_snapshot(self, user_id, snapshot_id):
        db: Session = self._session_factory()
        try:
            row = db.get(BackupSnapshotRecord, (user_id, snapshot_id))
            if row is not None:
                db.delete(row)
                db.commit()
        finally:
            db.close()

    def get_summaries(self, user_id):
        db: Session = self._session_factory()
        try:
            row = db.get(BackupSummaryList, user_id)
            return _summary_list.validate_python(row.summaries) if row else []
        finally:
            db.close()

    def put_summaries(self, user_id, summaries):
        db: Session = self._session_factory()
        try:
            db.merge(
                BackupSummaryList(
                    user_id=user_id,
                    summaries=_summary_list.dump_python(summaries, mode="json"),
                )
            )
            db.commit()
        finally:
            db.close()

    def get_auto_backup_marker(self, user_id):
        db: Session = self._session_factory()
        try:
            row = db.get(AutoBackupMarker, user_id)
            return row.last_run if row else None
        finally:
            db.close()

    def set_auto_backup_marker(self, user_id, day):
        db: Session = self._session_factory()
        try:
            db.merge(AutoBackupMarker(user_id=user_id, last_run=day.isoformat()))
            db.commit()
        finally:
            db.close()


def _safe_name(name: str) -> bool:
    return bool(name) and "/" not in name and "\\" not in name and not name.startswith(".")


class FileSnapshotStore(SnapshotStore):
    """
    One directory per user:

        <root>/<user_id>/<snapshot_id>.json
        <root>/<user_id>/summaries.json
        <root>/<user_id>/last_auto_backup

    Ids that could escape the root never match a stored key: reads return
    nothing, deletes do nothing and writes raise ``ValueError``.
    """

    kind = "filesystem"

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _user_dir(self, user_id: str) -> Path | None:
        return self.root / user_id if _safe_name(user_id) else None

    def _snapshot_path(self, user_id: str, snapshot_id: str) -> Path | None:
        d = self._user_dir(user_id)
        if d is None or not _safe_name(snapshot_id):
            return None
        return d / f"{snapshot_id}.json"

    def _writable_dir(self, user_id: str) -> Path:
        d = self._user_dir(user_id)
        if d is None:
            raise ValueError(f"Invalid user id for file storage: {user_id!r}")
        d.mkdir(parents=True, exist_ok=True)
        return d

    def get_snapshot(self, user_id, snapshot_id):
        p = self._snapshot_path(user_id, snapshot_id)
        if p is None or not p.exists():
            return None
        return BackupSnapshot.model_validate_json(p.read_text(encoding="utf-8"))

    def put_snapshot(self, snapshot):
        p = self._snapshot_path(snapshot.user_id, snapshot.id)
        if p is None:
            raise ValueError(f"Invalid snapshot key: {snapshot.user_id!r}/{snapshot.id!r}")
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(snapshot.model_dump_json(), encoding="utf-8")

    def delete_snapshot(self, user_id, snapshot_id):
        p = self._snapshot_path(user_id, snapshot_id)
        if p is not None:
            p.unlink(missing_ok=True)

    def get_summaries(self, user_id):
        d = self._user_dir(user_id)
        if d is None or not (d / "summaries.json").exists():
            return []
        return _summary_list.validate_json((d / "summaries.json").read_text(encoding="utf-8"))

    def put_summaries(self, user_id, summaries):
        d = self._writable_dir(user_id)
        (d / "summaries.json").write_bytes(_summary_list.dump_json(summaries, indent=2))

    def get_auto_backup_marker(self, user_id):
        d = self._user_dir(user_id)
        if d is None or not (d / "last_auto_backup").exists():
            return None
        return (d / "last_auto_backup").read_text(encoding="utf-8").strip()

    def set_auto_backup_marker(self, user_id, day):
        d = self._writable_dir(user_id)
        (d / "last_auto_backup").write_text(day.isoformat(), encoding="utf-8")


def build_snapshot_store(settings: Settings, session_factory: sessionmaker | None) -> SnapshotStore:
    kind = settings.BACKUP_STORAGE.lower()
    if kind == "database":
        if session_factory is None:
            raise ConfigurationError("BACKUP_STORAGE=database requires POSTGRES_DSN")
        return DatabaseSnapshotStore(session_factory)
    if kind == "filesystem":
        return FileSnapshotStore(settings.BACKUP_DIR)
    if kind == "memory":
        logger.warning("Using in-memory snapshot storage; backups are lost on restart")
        return InMemorySnapshotStore()
    raise ConfigurationError(f"Unknown BACKUP_STORAGE: {settings.BACKUP_STORAGE!r}")
