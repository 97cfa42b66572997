import os
import tempfile

# Configure the app before anything imports villacms.config
_TMP_DIR = tempfile.mkdtemp(prefix="villacms-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "test.db")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from villacms.db import Base, SessionLocal, engine
from villacms.main import app
from villacms.models import Room, User, Villa
from villacms.security import hash_password


def login(client: TestClient, username: str, password: str):
    resp = client.post("/api/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(username: str, password: str = "secret123", role: str = "owner") -> User:
        user = User(username=username, hashed_password=hash_password(password), role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def staff_client(make_user):
    make_user("desk", "desk-pass", "frontdesk_main")
    c = TestClient(app)
    login(c, "desk", "desk-pass")
    return c


@pytest.fixture
def admin_client(make_user):
    make_user("boss", "boss-pass", "admin")
    c = TestClient(app)
    login(c, "boss", "boss-pass")
    return c


@pytest.fixture
def villa(db):
    v = Villa(name="Elysian", location="Ubud")
    db.add(v)
    db.commit()
    db.refresh(v)
    return v


@pytest.fixture
def make_room(db, villa):
    def _make(name: str = "Garden Room", status: str = "available") -> Room:
        room = Room(villa_id=villa.id, name=name, capacity=2, status=status)
        db.add(room)
        db.commit()
        db.refresh(room)
        return room
    return _make


@pytest.fixture
def room(make_room):
    return make_room()
