import threading

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.auth.jwt import issue_admin_token
from app.config import settings
from app.db.base import Base
from app.db.session import engine as app_engine
from app.db.session import get_db
from app.main import app
from app.observability import metrics_store
from app.services.broadcast import broadcaster


class RecordingPublisher:
    def __init__(self) -> None:
        self.published: list[tuple[str, str, dict]] = []

    def publish(self, room: str, event: str, data: dict) -> None:
        self.published.append((room, event, data))

    def events_for(self, room: str) -> list[str]:
        return [event for published_room, event, _ in self.published if published_room == room]


@pytest.fixture(scope="session", autouse=True)
def setup_test_schema():
    Base.metadata.drop_all(bind=app_engine)
    Base.metadata.create_all(bind=app_engine)
    yield
    Base.metadata.drop_all(bind=app_engine)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=app_engine)
    Base.metadata.create_all(bind=app_engine)
    yield


@pytest.fixture(autouse=True)
def reset_metrics_store():
    metrics_store.reset()
    yield


@pytest.fixture(autouse=True)
def reset_broadcaster():
    broadcaster.reset()
    yield
    broadcaster.reset()


@pytest.fixture(autouse=True)
def isolated_upload_dir(tmp_path):
    original = settings.upload_dir
    settings.upload_dir = str(tmp_path / "uploads")
    yield tmp_path / "uploads"
    settings.upload_dir = original


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def db_session():
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=app_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(db_session):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=app_engine)
    db_session_lock = threading.Lock()

    def override_get_db():
        if db_session_lock.acquire(blocking=False):
            try:
                yield db_session
            finally:
                db_session_lock.release()
            return

        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token():
    return issue_admin_token("pos-admin", settings.jwt_secret)


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture(scope="session", autouse=True)
def enable_testing_mode():
    original = settings.testing
    settings.testing = True
    yield
    settings.testing = original
