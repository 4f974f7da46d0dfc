import logging
import threading
from datetime import date as DateType

from healthlog.core.backup import BackupManager
from healthlog.core.errors import HealthLogError
from healthlog.core.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class AutoBackupScheduler:
    """
    At most one automatic backup per user per calendar day, kicked off a few
    seconds after the user first shows up rather than on a real schedule.
    """

    def __init__(self, manager: BackupManager, store: SnapshotStore, delay_seconds: float = 5.0):
        self.manager = manager
        self.store = store
        self.delay_seconds = delay_seconds
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def initialize(self, user_id: str, today: DateType | None = None) -> bool:
        """Schedule today's automatic backup. Returns False if it already ran or is pending."""
        today = today or self.manager.today()

        if self.store.get_auto_backup_marker(user_id) == today.isoformat():
            logger.debug("Automatic backup already ran today for user %s", user_id)
            return False

        with self._lock:
            pending = self._timers.get(user_id)
            if pending is not None and pending.is_alive():
                return False
            timer = threading.Timer(self.delay_seconds, self._run, args=(user_id, today))
            timer.daemon = True
            self._timers[user_id] = timer
            timer.start()

        logger.info("Automatic backup for user %s scheduled in %.1fs", user_id, self.delay_seconds)
        return True

    def _run(self, user_id: str, today: DateType) -> None:
        try:
            self.manager.create_automatic_snapshot(user_id, today)
            self.store.set_auto_backup_marker(user_id, today)
        except HealthLogError as e:
            logger.error("Automatic backup failed for user %s: %s", user_id, e)
        except Exception:
            logger.exception("Unexpected error during automatic backup for user %s", user_id)
        finally:
            with self._lock:
                self._timers.pop(user_id, None)

    def shutdown(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        if timers:
            logger.info("Cancelled %d pending automatic backups", len(timers))
