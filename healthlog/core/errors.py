"""Domain errors raised by the healthlog services.

Routers translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""


class HealthLogError(Exception):
    """Base class for all healthlog errors."""


class ConfigurationError(HealthLogError):
    """Required configuration is missing or invalid (detected at startup)."""


class StoreUnavailableError(HealthLogError):
    """The database could not be reached."""


class UserNotFoundError(HealthLogError):
    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class BackupNotFoundError(HealthLogError):
    def __init__(self, backup_id: str):
        super().__init__(f"Backup not found: {backup_id}")
        self.backup_id = backup_id


class InvalidSnapshotError(HealthLogError):
    """An uploaded backup artifact could not be parsed or is from an unsupported format."""


class RestoreError(HealthLogError):
    """A restore batch failed; the transaction was rolled back."""

    def __init__(self, table: str | None, message: str):
        prefix = f"Restore failed on {table}" if table else "Restore failed"
        super().__init__(f"{prefix}: {message}")
        self.table = table


class TemplateNotFoundError(HealthLogError):
    def __init__(self, template_id: str):
        super().__init__(f"Report template not found: {template_id}")
        self.template_id = template_id


class DefaultTemplateError(HealthLogError):
    """Default report templates cannot be deleted."""
