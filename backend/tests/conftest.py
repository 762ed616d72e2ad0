import os

# Must be set before classboard.core.config builds its cached settings.
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"

import pytest
from fastapi.testclient import TestClient #fake http client that calls the FastAPI routes without a real server
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import classboard.models  # noqa: F401
from classboard.api.deps import get_db
from classboard.db.base import Base
from classboard.main import app
from classboard.services.store import ScheduleStore


@pytest.fixture()
def engine():
    engine = create_engine( #isolated in-memory DB per test
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def store(db_session):
    return ScheduleStore(db_session)


@pytest.fixture()
def school_class(store):
    return store.create_class(name="Algebra I", subject="Mathematics", created_date="2026-01-05")


@pytest.fixture()
def add_schedule(store):
    def _add(class_id, day_of_week, start_time, end_time):
        return store.create_schedule(
            class_id=class_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )

    return _add


@pytest.fixture() #test client
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
