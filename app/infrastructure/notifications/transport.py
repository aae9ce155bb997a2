"""Room based fan-out on top of FastAPI websockets."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Protocol
from uuid import uuid4

from anyio import from_thread
from fastapi import WebSocket, WebSocketDisconnect

from .events import SocketEvent, event_name

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


class Connection(Protocol):
    """One live client session as seen by the presence registry."""

    id: str
    data: dict[str, Any]

    def on(self, event: SocketEvent | str, handler: EventHandler) -> None: ...

    def join(self, room: str) -> None: ...

    def leave(self, room: str) -> None: ...

    def emit(self, event: SocketEvent | str, payload: Any) -> None: ...


class Transport(Protocol):
    """Endpoint that accepts connections and broadcasts to rooms."""

    def on_connection(self, handler: Callable[[Connection], None]) -> None: ...

    def emit_to_room(self, room: str, event: SocketEvent | str, payload: Any) -> int: ...


class WebSocketConnection:
    """Wrap a :class:`WebSocket` with an id, per-event handlers and room membership."""

    def __init__(self, transport: "WebSocketTransport", websocket: WebSocket) -> None:
        self.id = uuid4().hex
        self.data: dict[str, Any] = {}
        self.rooms: set[str] = set()
        self._transport = transport
        self._websocket = websocket
        self._handlers: DefaultDict[str, list[EventHandler]] = defaultdict(list)

    def on(self, event: SocketEvent | str, handler: EventHandler) -> None:
        self._handlers[event_name(event)].append(handler)

    def join(self, room: str) -> None:
        self.rooms.add(room)
        self._transport._add_to_room(room, self.id)

    def leave(self, room: str) -> None:
        self.rooms.discard(room)
        self._transport._remove_from_room(room, self.id)

    def emit(self, event: SocketEvent | str, payload: Any) -> None:
        self._transport._schedule_send(self, {"type": event_name(event), "data": payload})

    def dispatch(self, event: str, data: Any) -> bool:
        """Invoke the handlers registered for ``event``; return ``False`` if none exist."""

        handlers = list(self._handlers.get(event, ()))
        for handler in handlers:
            handler(data)
        return bool(handlers)

    async def send_json(self, message: dict[str, Any]) -> None:
        try:
            await self._websocket.send_json(message)
        except Exception:  # pragma: no cover - peer went away mid-send
            logger.debug("Dropping frame for closed socket %s", self.id, exc_info=True)


class WebSocketTransport:
    """Accept websocket sessions and deliver ``{"type", "data"}`` frames to rooms.

    Emits never wait for delivery. Every send runs as its own task on the
    event loop; worker threads (sync FastAPI endpoints) only wait for
    :func:`anyio.from_thread.run_sync` to create that task.
    """

    def __init__(self) -> None:
        self._connections: dict[str, WebSocketConnection] = {}
        self._rooms: DefaultDict[str, set[str]] = defaultdict(set)
        self._connection_handlers: list[Callable[[Connection], None]] = []
        self._pending: set[asyncio.Task] = set()

    def on_connection(self, handler: Callable[[Connection], None]) -> None:
        self._connection_handlers.append(handler)

    def room_members(self, room: str) -> set[str]:
        return set(self._rooms.get(room, ()))

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def emit_to_room(self, room: str, event: SocketEvent | str, payload: Any) -> int:
        """Send ``payload`` to every connection in ``room``; return the recipient count."""

        message = {"type": event_name(event), "data": payload}
        recipients = [
            self._connections[connection_id]
            for connection_id in list(self._rooms.get(room, ()))
            if connection_id in self._connections
        ]
        for connection in recipients:
            self._schedule_send(connection, message)
        return len(recipients)

    async def serve(self, websocket: WebSocket, *, data: dict[str, Any] | None = None) -> None:
        """Run the receive loop for ``websocket`` until the peer disconnects."""

        await websocket.accept()
        connection = WebSocketConnection(self, websocket)
        connection.data.update(data or {})
        self._connections[connection.id] = connection
        for handler in list(self._connection_handlers):
            handler(connection)

        try:
            while True:
                try:
                    message = await websocket.receive_json()
                except WebSocketDisconnect:
                    raise
                except (ValueError, KeyError):
                    logger.debug("Ignoring malformed frame from socket %s", connection.id)
                    continue

                if not isinstance(message, dict):
                    continue

                message_type = message.get("type")
                if message_type == "ping":
                    await websocket.send_json({"type": "pong"})
                    continue
                if not isinstance(message_type, str) or message_type == event_name(
                    SocketEvent.DISCONNECT
                ):
                    continue
                if not connection.dispatch(message_type, message.get("data")):
                    logger.debug(
                        "No handler for event %r on socket %s", message_type, connection.id
                    )
        except WebSocketDisconnect:
            pass
        finally:
            self._close(connection)

    def _close(self, connection: WebSocketConnection) -> None:
        try:
            connection.dispatch(event_name(SocketEvent.DISCONNECT), None)
        finally:
            for room in list(connection.rooms):
                self._remove_from_room(room, connection.id)
            connection.rooms.clear()
            self._connections.pop(connection.id, None)

    def _add_to_room(self, room: str, connection_id: str) -> None:
        self._rooms[room].add(connection_id)

    def _remove_from_room(self, room: str, connection_id: str) -> None:
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            self._rooms.pop(room, None)

    def _schedule_send(self, connection: WebSocketConnection, message: dict[str, Any]) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run_sync(self._start_send, connection, message)
            except RuntimeError:
                logger.warning(
                    "Cannot deliver %r to socket %s outside of the event loop",
                    message.get("type"),
                    connection.id,
                )
        else:
            self._start_send(connection, message)

    def _start_send(self, connection: WebSocketConnection, message: dict[str, Any]) -> None:
        task = asyncio.get_running_loop().create_task(connection.send_json(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


__all__ = [
    "Connection",
    "EventHandler",
    "Transport",
    "WebSocketConnection",
    "WebSocketTransport",
]
