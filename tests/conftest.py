import os

# Must be set before the app package creates its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest
from fastapi.testclient import TestClient

from app import config
from app.database import Base, SessionLocal, engine, get_db
from app.main import app
from app.models import User, WorkItem
from app.services import notification_service


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    monkeypatch.setattr(config, "STRICT_STATUS_TRANSITIONS", True)
    monkeypatch.setattr(config, "BILL_ONCE_PER_WORK_ITEM", True)


@pytest.fixture()
def emitted():
    """Captures real-time payloads instead of logging them"""
    events = []
    notification_service.set_realtime_emitter(
        lambda user_id, name, payload: events.append((user_id, name, payload))
    )
    yield events
    notification_service.set_realtime_emitter(None)


def make_user(db, username, role="freelancer", **kwargs):
    user = User(username=username, email=f"{username}@example.com", role=role, **kwargs)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin(db):
    return make_user(db, "admin", role="admin")


@pytest.fixture()
def alice(db):
    return make_user(db, "alice", handle="alice")


@pytest.fixture()
def bob(db):
    return make_user(db, "bob", handle="bob")


def headers(user):
    return {"X-User-Id": str(user.id)}


def make_item(db, use_case="Invoice reminder flow", price=100.0, status="new", assigned_to=None, **kwargs):
    item = WorkItem(use_case=use_case, price=price, status=status, assigned_to=assigned_to, **kwargs)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item
