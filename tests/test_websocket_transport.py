"""Tests for the websocket transport driven by a scripted socket."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import anyio
from fastapi import WebSocketDisconnect

from app.infrastructure.notifications import PresenceRegistry, WebSocketTransport


class ScriptedWebSocket:
    """Feed frames to the transport; callables run between frames."""

    def __init__(self, script: list) -> None:
        self._script = list(script)
        self.accepted = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def receive_json(self):
        while True:
            # let scheduled sends run before the next frame arrives
            await asyncio.sleep(0)
            if not self._script:
                raise WebSocketDisconnect(code=1000)
            step = self._script.pop(0)
            if isinstance(step, Exception):
                raise step
            if callable(step):
                await step()
                continue
            return step

    async def send_json(self, message: dict) -> None:
        self.sent.append(message)


def _serve(script: list, **data) -> tuple[ScriptedWebSocket, WebSocketTransport, PresenceRegistry]:
    transport = WebSocketTransport()
    registry = PresenceRegistry()
    registry.initialize(transport)
    websocket = ScriptedWebSocket(script)

    async def main() -> None:
        await transport.serve(websocket, data=data)

    anyio.run(main)
    return websocket, transport, registry


def _check(predicate: Callable[[], None]) -> Callable[[], Awaitable[None]]:
    async def step() -> None:
        predicate()

    return step


def test_frames_are_dispatched_and_pings_answered():
    transport = WebSocketTransport()
    registry = PresenceRegistry()
    registry.initialize(transport)
    observed = {}

    def snapshot() -> None:
        observed["family"] = registry.family_connections(42)
        observed["rooms"] = transport.room_members("family:42")

    websocket = ScriptedWebSocket(
        [
            {"type": "authenticate", "data": {"userId": 7}},
            {"type": "join_family", "data": {"familyId": 42}},
            _check(snapshot),
            {"type": "ping"},
        ]
    )

    anyio.run(transport.serve, websocket)

    assert websocket.accepted
    assert websocket.sent == [
        {"type": "authenticated", "data": {"userId": 7}},
        {"type": "pong"},
    ]
    assert len(observed["family"]) == 1
    assert observed["rooms"] == set(observed["family"])


def test_malformed_and_unknown_frames_are_ignored():
    websocket, _, registry = _serve(
        [
            ValueError("not json"),
            ["not", "an", "object"],
            {"data": {}},
            {"type": "unknown_event"},
            {"type": "disconnect"},
            {"type": "ping"},
        ]
    )

    assert websocket.sent == [{"type": "pong"}]
    assert registry.stats() == {"users": 0, "families": 0, "connections": 0}


def test_disconnect_cleans_registry_and_rooms():
    websocket, transport, registry = _serve(
        [
            {"type": "authenticate", "data": {"userId": 7}},
            {"type": "join_family", "data": {"familyId": 1}},
            {"type": "join_family", "data": {"familyId": 2}},
        ]
    )

    assert websocket.sent[0]["type"] == "authenticated"
    assert registry.stats() == {"users": 0, "families": 0, "connections": 0}
    assert transport.connection_count == 0
    assert transport.room_members("family:1") == set()
    assert transport.room_members("user:7") == set()


def test_principal_from_transport_data_is_enforced():
    websocket, _, _ = _serve(
        [{"type": "authenticate", "data": {"userId": 8}}],
        principal_id=7,
    )

    assert websocket.sent == [{"type": "error", "data": {"message": "Not authorized"}}]


def test_emit_from_worker_thread_reaches_the_socket():
    transport = WebSocketTransport()
    registry = PresenceRegistry()
    registry.initialize(transport)

    async def notify_from_thread() -> None:
        delivered = await anyio.to_thread.run_sync(
            registry.notify_budget_created, 42, {"id": 1, "category": "Food"}
        )
        assert delivered == 1

    websocket = ScriptedWebSocket(
        [
            {"type": "authenticate", "data": {"userId": 7}},
            {"type": "join_family", "data": {"familyId": 42}},
            notify_from_thread,
        ]
    )

    anyio.run(transport.serve, websocket)

    assert websocket.sent[1]["type"] == "budget_created"
    assert websocket.sent[1]["data"]["category"] == "Food"


def test_non_ascii_digit_id_gets_an_error_frame():
    websocket, transport, registry = _serve(
        [
            {"type": "authenticate", "data": {"userId": "²"}},
            {"type": "ping"},
        ]
    )

    assert websocket.sent == [
        {"type": "error", "data": {"message": "Invalid user id"}},
        {"type": "pong"},
    ]
    assert registry.connected_user_ids() == []


class GatedWebSocket(ScriptedWebSocket):
    """Hold back budget frames until ``gate`` is set."""

    def __init__(self, script: list) -> None:
        super().__init__(script)
        self.gate: anyio.Event | None = None

    async def send_json(self, message: dict) -> None:
        if message["type"] == "budget_created":
            await self.gate.wait()
        await super().send_json(message)


def test_worker_thread_emit_does_not_wait_for_delivery():
    transport = WebSocketTransport()
    registry = PresenceRegistry()
    registry.initialize(transport)

    async def notify_from_thread() -> None:
        websocket.gate = anyio.Event()
        delivered = await anyio.to_thread.run_sync(
            registry.notify_budget_created, 42, {"id": 1, "category": "Food"}
        )
        assert delivered == 1
        assert [message["type"] for message in websocket.sent] == ["authenticated"]
        websocket.gate.set()

    async def settle() -> None:
        for _ in range(3):
            await asyncio.sleep(0)

    websocket = GatedWebSocket(
        [
            {"type": "authenticate", "data": {"userId": 7}},
            {"type": "join_family", "data": {"familyId": 42}},
            notify_from_thread,
            settle,
        ]
    )

    anyio.run(transport.serve, websocket)

    assert [message["type"] for message in websocket.sent] == [
        "authenticated",
        "budget_created",
    ]
