"""Shared fixtures: an in-memory SQLite database, an in-memory snapshot store
and a controllable clock."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

load_dotenv(".env.test")
os.environ.setdefault("ENVIRONMENT", "testing")

from healthlog.core.backup import BackupManager  # noqa: E402
from healthlog.core.db import Base, make_session_factory  # noqa: E402
from healthlog.core.records import RecordStore  # noqa: E402
from healthlog.core.schema import SchemaInspector  # noqa: E402
from healthlog.core.snapshot_store import InMemorySnapshotStore  # noqa: E402
from healthlog.main import create_app  # noqa: E402
from healthlog.models import User  # noqa: E402


class FakeClock:
    """Returns a fixed instant; ``advance`` moves it forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def engine():
    engine = make_engine()
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 15, 9, 30, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def manager(engine, session_factory, store, clock) -> BackupManager:
    return BackupManager(session_factory, RecordStore(SchemaInspector(engine)), store, clock=clock)


@pytest.fixture
def user(db) -> User:
    u = User(email="jayne@example.com", name="Jayne", role="patient")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def app(engine, session_factory, store, clock):
    return create_app(engine=engine, session_factory=session_factory, store=store, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
