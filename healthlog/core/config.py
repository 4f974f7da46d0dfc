from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    # Optional at import time; the app refuses to start without it.
    POSTGRES_DSN: str | None = None
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Snapshots kept per user, newest first
    BACKUP_RETENTION: int = 10

    # Where snapshot payloads live: "database", "filesystem" or "memory"
    BACKUP_STORAGE: str = "database"
    BACKUP_DIR: str = "./backups"

    # Automatic daily backup runs this long after a user's first load of the day
    AUTO_BACKUP_DELAY_SECONDS: float = 5.0


settings = Settings()
