import os

# Settings() needs these when a test builds an app without explicit settings
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-scene-api-suite")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.database import init_db, make_engine
from app.main import create_app
from app.repositories.scene_repo import SceneStore
from app.services import scene_service

SECRET = "test-secret-key-for-the-scene-api-suite"
OWNER = "507f1f77bcf86cd799439011"
OTHER_OWNER = "5f8d0d55b54764421b7156c9"


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'scenes.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return SceneStore(engine)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        SECRET_KEY=SECRET,
        DATABASE_URL=f"sqlite:///{tmp_path / 'api.db'}",
        DATA_DIR=str(tmp_path / "data"),
    )


@pytest.fixture
def dispatched(monkeypatch):
    calls = []

    def fake_send_task(name, args=None, kwargs=None, **options):
        calls.append({"name": name, "args": args, "kwargs": kwargs})

    monkeypatch.setattr(scene_service.celery_app, "send_task", fake_send_task)
    return calls


@pytest.fixture
def app(settings, dispatched):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api_store(app):
    return app.state.scene_store


@pytest.fixture
def auth_headers(app):
    def make(owner_id=OWNER):
        token = app.state.token_codec.issue(owner_id)
        return {"Authorization": f"Bearer {token}"}
    return make
