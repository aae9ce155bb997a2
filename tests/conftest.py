"""Shared fixtures: an isolated sqlite database and in-memory realtime fakes."""

from __future__ import annotations

import os
import tempfile
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable
from uuid import uuid4

import pytest

TEST_DB_PATH = Path(tempfile.gettempdir()) / "finfam_api_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["LOG_LEVEL"] = "DEBUG"

from app.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.infrastructure.notifications import PresenceRegistry  # noqa: E402
from app.infrastructure.notifications.events import event_name  # noqa: E402


class FakeConnection:
    """Connection double that records what the registry emits to it."""

    def __init__(self, transport: "FakeTransport", connection_id: str) -> None:
        self.id = connection_id
        self.data: dict[str, Any] = {}
        self.rooms: set[str] = set()
        self.emitted: list[tuple[str, Any]] = []
        self._transport = transport
        self._handlers: dict[str, list[Callable[[Any], None]]] = defaultdict(list)

    def on(self, event, handler) -> None:
        self._handlers[event_name(event)].append(handler)

    def join(self, room: str) -> None:
        self.rooms.add(room)
        self._transport.rooms[room].add(self.id)

    def leave(self, room: str) -> None:
        self.rooms.discard(room)
        self._transport.rooms[room].discard(self.id)

    def emit(self, event, payload) -> None:
        self.emitted.append((event_name(event), payload))

    def trigger(self, event: str, data: Any = None) -> None:
        for handler in list(self._handlers.get(event, ())):
            handler(data)

    def events(self, name: str) -> list[Any]:
        return [payload for event, payload in self.emitted if event == name]


class FakeTransport:
    """Synchronous transport double with socket.io style rooms."""

    def __init__(self) -> None:
        self.rooms: dict[str, set[str]] = defaultdict(set)
        self.connections: dict[str, FakeConnection] = {}
        self._connection_handlers: list[Callable[[FakeConnection], None]] = []

    def on_connection(self, handler) -> None:
        self._connection_handlers.append(handler)

    def connect(self, **data: Any) -> FakeConnection:
        connection = FakeConnection(self, uuid4().hex)
        connection.data.update(data)
        self.connections[connection.id] = connection
        for handler in self._connection_handlers:
            handler(connection)
        return connection

    def disconnect(self, connection: FakeConnection) -> None:
        connection.trigger("disconnect")
        for room in list(connection.rooms):
            connection.leave(room)
        self.connections.pop(connection.id, None)

    def emit_to_room(self, room, event, payload) -> int:
        recipients = [self.connections[cid] for cid in self.rooms.get(room, ()) if cid in self.connections]
        for connection in recipients:
            connection.emitted.append((event_name(event), payload))
        return len(recipients)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def registry(transport: FakeTransport) -> PresenceRegistry:
    presence = PresenceRegistry()
    presence.initialize(transport)
    return presence


@pytest.fixture()
def database():
    """Recreate every table so each test starts from an empty database."""

    from app.infrastructure.database import Base, engine, initialize_database

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def api(database):
    from main import create_app

    return create_app()


@pytest.fixture()
def client(api):
    from fastapi.testclient import TestClient

    with TestClient(api) as test_client:
        yield test_client


def register(client, *, name: str, email: str, password: str = "Secret123") -> dict[str, Any]:
    """Register an account and return its id, token and auth headers."""

    response = client.post(
        "/auth/register", json={"name": name, "email": email, "password": password}
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "id": body["user"]["id"],
        "token": body["access_token"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


def create_admin(client, *, email: str = "admin@example.com", password: str = "Secret123") -> dict[str, Any]:
    from app.application.use_cases.users import create_user
    from app.infrastructure.database import SessionLocal

    with SessionLocal() as session:
        admin = create_user(
            session, name="Admin", email=email, password=password, role_alias="admin"
        )

    response = client.post("/auth/token", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]
    return {"id": admin.id, "token": token, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture()
def register_user(client):
    def _register(name: str, email: str, password: str = "Secret123") -> dict[str, Any]:
        return register(client, name=name, email=email, password=password)

    return _register


@pytest.fixture()
def admin_account(client) -> dict[str, Any]:
    return create_admin(client)
