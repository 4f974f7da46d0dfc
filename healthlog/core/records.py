import logging
from typing import Any

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from healthlog.core.schema import SchemaInspector
from healthlog.core.tables import BackupTable

logger = logging.getLogger(__name__)


class RecordStore:
    """
    The three per-table primitives backups rely on: select, bulk insert and
    delete, all scoped by ``user_id``.
    """

    def __init__(self, schema: SchemaInspector):
        self.schema = schema

    def has_table(self, table: BackupTable) -> bool:
        return self.schema.has_table(table.name)

    def select_for_user(self, db: Session, table: BackupTable, user_id: str) -> list[BaseModel]:
        model = table.model
        result = db.execute(select(model).where(model.user_id == user_id).order_by(model.id))
        return [table.row.model_validate(obj) for obj in result.scalars().all()]

    def insert_rows(self, db: Session, table: BackupTable, rows: list[dict[str, Any]]) -> int:
        db.add_all([table.model(**row) for row in rows])
        db.flush()
        return len(rows)

    def delete_for_user(self, db: Session, table: BackupTable, user_id: str) -> int:
        model = table.model
        result = db.execute(delete(model).where(model.user_id == user_id))
        return result.rowcount or 0
