import uuid
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from healthlog.core.config import settings

Base = declarative_base()

engine = None
SessionLocal = None


def make_engine(dsn: str) -> Engine:
    return create_engine(dsn, future=True, pool_pre_ping=True)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


if settings.POSTGRES_DSN:
    engine = make_engine(settings.POSTGRES_DSN)
    SessionLocal = make_session_factory(engine)


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
