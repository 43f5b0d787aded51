from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.shared.config import settings
from app.shared.db import get_db, init_db
from app.shared.sessions import SessionRegistry


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kw):
        self.now += timedelta(**kw)


@pytest.fixture
def files_root(tmp_path, monkeypatch):
    root = tmp_path / "userfiles"
    monkeypatch.setattr(settings, "FILES_ROOT", str(root))
    return root


@pytest.fixture
def db_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{(tmp_path / 'test.db').as_posix()}",
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def db(db_factory, files_root):
    s = db_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sessions(clock):
    return SessionRegistry(secret="test-secret", ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def client(db_factory, files_root, sessions):
    def _get_db():
        s = db_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    previous = app.state.sessions
    app.state.sessions = sessions
    try:
        yield TestClient(app)
    finally:
        app.state.sessions = previous
        app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Register (if needed) and log in; returns auth headers."""
    def _login(username="alice", password="pw1"):
        client.post("/api/register", json={"username": username, "password": password})
        r = client.post("/api/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}
    return _login
