"""Realtime presence tracking and notification fan-out."""

from .events import (
    BudgetPayload,
    DeletedPayload,
    ExpensePayload,
    NotificationPayload,
    SocketEvent,
    serialize_payload,
)
from .registry import PresenceRegistry, family_room, user_room
from .transport import Connection, Transport, WebSocketConnection, WebSocketTransport

__all__ = [
    "BudgetPayload",
    "Connection",
    "DeletedPayload",
    "ExpensePayload",
    "NotificationPayload",
    "PresenceRegistry",
    "SocketEvent",
    "Transport",
    "WebSocketConnection",
    "WebSocketTransport",
    "family_room",
    "serialize_payload",
    "user_room",
]
