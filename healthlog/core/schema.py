import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class SchemaInspector:
    """
    Answers "does this table exist in the live schema?".

    The table list is read once and cached; call ``refresh()`` after
    migrations run against a live process.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._tables: frozenset[str] | None = None

    def available_tables(self) -> frozenset[str]:
        if self._tables is None:
            self._tables = frozenset(inspect(self._engine).get_table_names())
            logger.debug("Schema has %d tables", len(self._tables))
        return self._tables

    def has_table(self, name: str) -> bool:
        return name in self.available_tables()

    def refresh(self) -> None:
        self._tables = None
