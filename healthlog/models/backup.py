from sqlalchemy import Column, DateTime, JSON, String

from healthlog.core.db import Base, utcnow


class BackupSnapshotRecord(Base):
    """Full snapshot payload, addressed by (user_id, id)."""

    __tablename__ = "backup_snapshots"

    user_id = Column(String(36), primary_key=True)
    id = Column(String(36), primary_key=True)
    payload = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)


class BackupSummaryList(Base):
    """Ordered summary list for one user, kept apart from the payloads."""

    __tablename__ = "backup_summary_lists"

    user_id = Column(String(36), primary_key=True)
    summaries = Column(JSON, nullable=False, default=list)

    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class AutoBackupMarker(Base):
    __tablename__ = "auto_backup_markers"

    user_id = Column(String(36), primary_key=True)
    last_run = Column(String(10), nullable=False)  # YYYY-MM-DD
