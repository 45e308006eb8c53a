from __future__ import annotations

import os

# Must be set before giftdesk builds its engine and settings.
os.environ["GIFTDESK_DATABASE_URL"] = "sqlite://"
os.environ["GIFTDESK_RECONCILE_ENABLED"] = "false"
os.environ["GIFTDESK_JWT_SECRET"] = "test-secret"

import threading

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from giftdesk.api.deps import get_object_store
from giftdesk.core.database import Base, get_db
from giftdesk.core.errors import StorageUnavailable
from giftdesk.core.security import hash_password
from giftdesk.core.storage import ObjectStore
from giftdesk.main import create_app
from giftdesk.models import Enrollment, User, UserRole

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeObjectStore(ObjectStore):
    """In-memory store; flip ``fail`` to simulate an outage."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.fail = False
        self._lock = threading.Lock()

    def put(self, data: bytes, media_type: str, *, filename: str | None = None) -> str:
        if self.fail:
            raise StorageUnavailable("Image storage is unavailable, please retry.")
        with self._lock:
            key = f"obj-{len(self.objects) + 1}-{filename or 'upload'}"
            self.objects[key] = (data, media_type)
        return f"https://objects.test/{key}"


@pytest.fixture()
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'giftdesk.db'}",
        future=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store():
    return FakeObjectStore()


@pytest.fixture()
def make_user(db):
    def _make(username: str, password: str = "pw", role: UserRole = UserRole.USER, **kwargs) -> User:
        user = User(username=username, password_hash=hash_password(password), role=role, **kwargs)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def make_enrollments(db):
    def _make(count: int, *, start: int = 1) -> list[Enrollment]:
        rows = [
            Enrollment(
                enrollment_number=f"E{n}",
                sequence_number=n,
                registration_number=f"PM-{n:04d}",
                name=f"Person {n}",
                address=f"{n} Station Road",
                phone_1=f"98765{n:05d}",
            )
            for n in range(start, start + count)
        ]
        db.add_all(rows)
        db.commit()
        return rows

    return _make


@pytest.fixture()
def client(session_factory, store):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_object_store] = lambda: store
    return TestClient(app)


def login(client: TestClient, username: str, password: str = "pw") -> dict[str, str]:
    r = client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}
