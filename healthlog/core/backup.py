"""
Backup, restore and export of everything a user has recorded.

A snapshot is built by reading every table in ``BACKUP_TABLES`` for one
user. Reads are best-effort: a table missing from the live schema, or a read
that fails, contributes an empty list instead of aborting the backup.

Restore replaces the user's rows wholesale. Deletes (children first) and
inserts (parents first) run in a single transaction, so a failed batch
leaves the previous data in place.
"""

import json
import logging
import uuid
from datetime import date as DateType, datetime
from typing import Any, Callable

from pydantic import ValidationError
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from healthlog.core.db import utcnow
from healthlog.core.errors import (
    BackupNotFoundError,
    InvalidSnapshotError,
    RestoreError,
    StoreUnavailableError,
    UserNotFoundError,
)
from healthlog.core.records import RecordStore
from healthlog.core.snapshot_store import SnapshotStore
from healthlog.core.tables import (
    BACKUP_TABLES,
    DELETE_ORDER,
    FITBIT,
    INSERT_ORDER,
    LAB,
    MEDICAL,
    WOMENS_HEALTH,
)
from healthlog.models.user import User
from healthlog.schemas.backup import (
    SNAPSHOT_FORMAT_VERSION,
    BackupSnapshot,
    BackupSummary,
    BackupType,
    RecordCounts,
    SnapshotData,
)

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = 10


def payload_size(data: SnapshotData) -> int:
    """Approximate artifact size: UTF-8 length of the serialized table lists."""
    return len(data.model_dump_json().encode("utf-8"))


def count_records(data: SnapshotData) -> RecordCounts:
    tables = {t.name: len(getattr(data, t.name)) for t in BACKUP_TABLES}

    def group_total(group: str) -> int:
        return sum(tables[t.name] for t in BACKUP_TABLES if t.group == group)

    return RecordCounts(
        health_entries=tables["health_entries"],
        food_entries=tables["food_entries"],
        activity_entries=tables["activity_entries"],
        fitbit_data=group_total(FITBIT),
        womens_health=group_total(WOMENS_HEALTH),
        lab_results=group_total(LAB),
        medical=group_total(MEDICAL),
        total=sum(tables.values()),
        tables=tables,
    )


def summarize(snapshot: BackupSnapshot) -> BackupSummary:
    return BackupSummary(
        id=snapshot.id,
        user_id=snapshot.user_id,
        backup_name=snapshot.backup_name,
        backup_type=snapshot.backup_type,
        created_at=snapshot.created_at,
        file_size=snapshot.file_size,
        record_counts=count_records(snapshot.data),
    )


class BackupManager:
    def __init__(
        self,
        session_factory: sessionmaker,
        records: RecordStore,
        store: SnapshotStore,
        retention: int = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utcnow,
    ):
        if retention < 1:
            raise ValueError("retention must be at least 1")
        self._session_factory = session_factory
        self.records = records
        self.store = store
        self.retention = retention
        self._clock = clock

    def today(self) -> DateType:
        return self._clock().date()

    # ---------- create ----------

    def _require_user(self, db: Session, user_id: str) -> User:
        try:
            user = db.get(User, user_id)
        except OperationalError as e:
            raise StoreUnavailableError(f"Database unreachable: {e}") from e
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _collect(self, db: Session, user_id: str) -> SnapshotData:
        collected: dict[str, list[Any]] = {}
        for table in BACKUP_TABLES:
            if not self.records.has_table(table):
                logger.warning("Table %s not in schema; backing it up as empty", table.name)
                collected[table.name] = []
                continue
            try:
                collected[table.name] = self.records.select_for_user(db, table, user_id)
            except SQLAlchemyError as e:
                logger.warning("Reading %s failed, backing it up as empty: %s", table.name, e)
                db.rollback()
                # the cached table list is stale
                self.records.schema.refresh()
                collected[table.name] = []
        return SnapshotData(**collected)

    def create_snapshot(
        self,
        user_id: str,
        backup_name: str | None = None,
        backup_type: BackupType = BackupType.MANUAL,
    ) -> BackupSnapshot:
        backup_type = BackupType(backup_type)
        logger.info("Creating %s backup for user %s", backup_type.value, user_id)

        db: Session = self._session_factory()
        try:
            self._require_user(db, user_id)
            data = self._collect(db, user_id)
        finally:
            db.close()

        now = self._clock()
        snapshot = BackupSnapshot(
            id=str(uuid.uuid4()),
            user_id=user_id,
            backup_name=backup_name or f"{backup_type.value}-backup-{now:%Y-%m-%d-%H-%M-%S}",
            backup_type=backup_type,
            data=data,
            created_at=now,
            file_size=payload_size(data),
        )
        summary = self._store_with_retention(snapshot)

        logger.info(
            "Backup %s (%s) created: %d records, %d bytes",
            snapshot.id,
            snapshot.backup_name,
            summary.record_counts.total,
            snapshot.file_size,
        )
        return snapshot

    def _store_with_retention(self, snapshot: BackupSnapshot) -> BackupSummary:
        self.store.put_snapshot(snapshot)

        summary = summarize(snapshot)
        existing = self.store.get_summaries(snapshot.user_id)
        # newest goes first so it wins ties on created_at
        ordered = sorted([summary, *existing], key=lambda s: s.created_at, reverse=True)
        kept, evicted = ordered[: self.retention], ordered[self.retention:]
        self.store.put_summaries(snapshot.user_id, kept)

        for old in evicted:
            logger.info("Evicting backup %s (%s)", old.id, old.backup_name)
            self.store.delete_snapshot(snapshot.user_id, old.id)
        return summary

    # ---------- read ----------

    def list_snapshots(self, user_id: str) -> list[BackupSummary]:
        return sorted(self.store.get_summaries(user_id), key=lambda s: s.created_at, reverse=True)

    def get_snapshot(self, user_id: str, snapshot_id: str) -> BackupSnapshot:
        snapshot = self.store.get_snapshot(user_id, snapshot_id)
        if snapshot is None:
            raise BackupNotFoundError(snapshot_id)
        return snapshot

    def download_snapshot(self, user_id: str, snapshot_id: str) -> tuple[str, bytes]:
        """Return ``(filename, content)`` for a JSON download of the full snapshot."""
        snapshot = self.get_snapshot(user_id, snapshot_id)
        content = json.dumps(snapshot.model_dump(mode="json"), indent=2).encode("utf-8")
        return f"{snapshot.backup_name}.json", content

    # ---------- delete ----------

    def delete_snapshot(self, user_id: str, snapshot_id: str) -> None:
        self.store.delete_snapshot(user_id, snapshot_id)
        summaries = self.store.get_summaries(user_id)
        remaining = [s for s in summaries if s.id != snapshot_id]
        if len(remaining) != len(summaries):
            self.store.put_summaries(user_id, remaining)
            logger.info("Deleted backup %s for user %s", snapshot_id, user_id)

    # ---------- restore ----------

    def restore_snapshot(self, user_id: str, snapshot_id: str) -> dict[str, int]:
        """
        Replace all of the user's rows with the snapshot's contents.

        Returns the number of rows inserted per table. Raises
        ``BackupNotFoundError`` before touching anything if the snapshot is
        unknown, and ``RestoreError`` (after rolling back) if any batch fails.
        """
        snapshot = self.get_snapshot(user_id, snapshot_id)
        data = snapshot.data
        logger.info("Restoring backup %s for user %s", snapshot_id, user_id)

        restored: dict[str, int] = {}
        current: str | None = None
        db: Session = self._session_factory()
        try:
            self._require_user(db, user_id)

            for table in DELETE_ORDER:
                if not self.records.has_table(table):
                    continue
                current = table.name
                deleted = self.records.delete_for_user(db, table, user_id)
                logger.debug("Cleared %d rows from %s", deleted, table.name)

            for table in INSERT_ORDER:
                rows = getattr(data, table.name)
                if not rows:
                    continue
                current = table.name
                if not self.records.has_table(table):
                    raise RestoreError(table.name, "table does not exist in the current schema")

                batch = []
                for row in rows:
                    values = row.model_dump(exclude_unset=True)
                    values["user_id"] = user_id
                    batch.append(values)
                restored[table.name] = self.records.insert_rows(db, table, batch)
                logger.info("Restored %s: %d", table.name, restored[table.name])

            db.commit()
        except RestoreError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Restore of backup %s failed on %s: %s", snapshot_id, current, e)
            raise RestoreError(current, str(e)) from e
        finally:
            db.close()

        logger.info("Backup %s restored for user %s", snapshot_id, user_id)
        return restored

    # ---------- upload ----------

    def import_snapshot(self, user_id: str, payload: dict[str, Any] | str | bytes) -> BackupSnapshot:
        """
        Store a previously downloaded backup file as a new snapshot owned by ``user_id``.
        """
        try:
            if isinstance(payload, (str, bytes)):
                uploaded = BackupSnapshot.model_validate_json(payload)
            else:
                uploaded = BackupSnapshot.model_validate(payload)
        except ValidationError as e:
            raise InvalidSnapshotError(f"Not a valid backup file: {e.error_count()} validation errors") from e

        if uploaded.format_version > SNAPSHOT_FORMAT_VERSION:
            raise InvalidSnapshotError(
                f"Backup format {uploaded.format_version} is newer than supported ({SNAPSHOT_FORMAT_VERSION})"
            )

        db: Session = self._session_factory()
        try:
            self._require_user(db, user_id)
        finally:
            db.close()

        data = uploaded.data
        for table in BACKUP_TABLES:
            for row in getattr(data, table.name):
                row.user_id = user_id

        snapshot = uploaded.model_copy(
            update={
                "id": str(uuid.uuid4()),
                "user_id": user_id,
                "data": data,
                "created_at": self._clock(),
                "file_size": payload_size(data),
                "format_version": SNAPSHOT_FORMAT_VERSION,
            }
        )
        self._store_with_retention(snapshot)
        logger.info("Imported backup %s as %s for user %s", uploaded.id, snapshot.id, user_id)
        return snapshot

    # ---------- automatic ----------

    def create_automatic_snapshot(self, user_id: str, today: DateType | None = None) -> BackupSnapshot | None:
        """Create today's automatic backup unless one already exists. Returns None when skipped."""
        today = today or self.today()
        stamp = today.isoformat()

        for summary in self.store.get_summaries(user_id):
            if summary.backup_type == BackupType.AUTOMATIC and stamp in summary.backup_name:
                logger.info("Automatic backup already exists for %s (user %s)", stamp, user_id)
                return None

        return self.create_snapshot(user_id, f"auto-backup-{stamp}", BackupType.AUTOMATIC)
