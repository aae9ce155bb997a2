"""Presence tracking and event fan-out for realtime clients.

The registry keeps two process-local membership maps:

* ``user id -> connection ids`` for authenticated connections, and
* ``family id -> connection ids`` for connections that joined a family room.

Entries are created on first join and removed as soon as their set becomes
empty. Nothing is persisted; clients re-authenticate and re-join their rooms
after a reconnect. Delivery is best effort: an event for a user or family
without live connections is dropped.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Union
from uuid import uuid4

from app.domain.entities import Budget, Expense
from app.utils import now_in_app_timezone

from .events import (
    BudgetPayload,
    DeletedPayload,
    EventPayload,
    ExpensePayload,
    NotificationPayload,
    SocketEvent,
    serialize_payload,
)
from .transport import Connection, Transport

logger = logging.getLogger(__name__)

BudgetLike = Union[Budget, BudgetPayload, Mapping[str, Any]]
ExpenseLike = Union[Expense, ExpensePayload, Mapping[str, Any]]

USER_ID_KEY = "user_id"
PRINCIPAL_ID_KEY = "principal_id"

_NOT_INITIALIZED_MESSAGE = "Attempted to send a notification before the realtime service was initialized"


def user_room(user_id: int) -> str:
    return f"user:{user_id}"


def family_room(family_id: int) -> str:
    return f"family:{family_id}"


def _coerce_id(data: Any, *keys: str) -> int | None:
    """Return the first integer found in ``data`` under ``keys``."""

    if not isinstance(data, dict):
        return None
    for key in keys:
        value = data.get(key)
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdecimal():
            try:
                return int(value)
            except ValueError:
                return None
    return None


class PresenceRegistry:
    """Track which connections belong to which user and family rooms."""

    def __init__(self) -> None:
        self._transport: Transport | None = None
        self._user_connections: dict[int, set[str]] = {}
        self._family_connections: dict[int, set[str]] = {}

    def initialize(self, transport: Transport) -> None:
        """Bind the registry to ``transport`` and subscribe to new connections."""

        if self._transport is transport:
            return
        if self._transport is not None:
            raise RuntimeError("Presence registry is already bound to another transport")

        self._transport = transport
        transport.on_connection(self._handle_connection)
        logger.info("Realtime notification service initialized")

    def _handle_connection(self, connection: Connection) -> None:
        logger.info("New socket connection: %s", connection.id)

        connection.on(
            SocketEvent.AUTHENTICATE,
            lambda data: self._on_authenticate(connection, data),
        )
        connection.on(
            SocketEvent.JOIN_FAMILY,
            lambda data: self._on_family_request(connection, data, join=True),
        )
        connection.on(
            SocketEvent.LEAVE_FAMILY,
            lambda data: self._on_family_request(connection, data, join=False),
        )
        connection.on(SocketEvent.DISCONNECT, lambda _data: self.handle_disconnect(connection))

    def _on_authenticate(self, connection: Connection, data: Any) -> None:
        user_id = _coerce_id(data, "userId", "user_id")
        if user_id is None:
            connection.emit(SocketEvent.ERROR, {"message": "Invalid user id"})
            return
        self.authenticate(connection, user_id)

    def _on_family_request(self, connection: Connection, data: Any, *, join: bool) -> None:
        family_id = _coerce_id(data, "familyId", "family_id")
        if family_id is None:
            connection.emit(SocketEvent.ERROR, {"message": "Invalid family id"})
            return
        if join:
            self.join_family_room(connection, family_id)
        else:
            self.leave_family_room(connection, family_id)

    # Membership -----------------------------------------------------------------

    def authenticate(self, connection: Connection, user_id: int) -> bool:
        """Associate ``connection`` with ``user_id`` and join the user room.

        A connection represents a single user at a time: authenticating as a
        different user first leaves the previous user's room. When the
        transport verified the caller (``principal_id`` in the connection
        data) only that identity is accepted.
        """

        principal_id = connection.data.get(PRINCIPAL_ID_KEY)
        if principal_id is not None and principal_id != user_id:
            logger.warning(
                "Socket %s tried to authenticate as user %s while signed in as %s",
                connection.id,
                user_id,
                principal_id,
            )
            connection.emit(SocketEvent.ERROR, {"message": "Not authorized"})
            return False

        previous_user_id = connection.data.get(USER_ID_KEY)
        if previous_user_id is not None and previous_user_id != user_id:
            self._discard_user_connection(previous_user_id, connection.id)
            connection.leave(user_room(previous_user_id))
            logger.info(
                "Socket %s switched from user %s to user %s",
                connection.id,
                previous_user_id,
                user_id,
            )

        connection.data[USER_ID_KEY] = user_id
        self._user_connections.setdefault(user_id, set()).add(connection.id)
        connection.join(user_room(user_id))
        connection.emit(SocketEvent.AUTHENTICATED, {"userId": user_id})

        logger.info("User authenticated: %s, Socket: %s", user_id, connection.id)
        return True

    def join_family_room(self, connection: Connection, family_id: int) -> bool:
        """Add an authenticated ``connection`` to the room of ``family_id``."""

        if connection.data.get(USER_ID_KEY) is None:
            connection.emit(SocketEvent.ERROR, {"message": "Not authenticated"})
            logger.warning(
                "Socket %s tried to join family %s before authenticating",
                connection.id,
                family_id,
            )
            return False

        connection.join(family_room(family_id))
        self._family_connections.setdefault(family_id, set()).add(connection.id)

        logger.info("Socket %s joined family room %s", connection.id, family_id)
        return True

    def leave_family_room(self, connection: Connection, family_id: int) -> None:
        """Remove ``connection`` from the room of ``family_id``; no-op when absent."""

        connection.leave(family_room(family_id))
        members = self._family_connections.get(family_id)
        if members is not None:
            members.discard(connection.id)
            if not members:
                del self._family_connections[family_id]

        logger.info("Socket %s left family room %s", connection.id, family_id)

    def handle_disconnect(self, connection: Connection) -> None:
        """Forget every membership held by ``connection``."""

        user_id = connection.data.get(USER_ID_KEY)
        if user_id is not None:
            self._discard_user_connection(user_id, connection.id)

        for family_id, members in list(self._family_connections.items()):
            if connection.id in members:
                members.discard(connection.id)
                if not members:
                    del self._family_connections[family_id]

        logger.info("Socket disconnected: %s", connection.id)

    def _discard_user_connection(self, user_id: int, connection_id: str) -> None:
        members = self._user_connections.get(user_id)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self._user_connections[user_id]

    # Introspection ----------------------------------------------------------------

    def user_connections(self, user_id: int) -> frozenset[str]:
        return frozenset(self._user_connections.get(user_id, ()))

    def family_connections(self, family_id: int) -> frozenset[str]:
        return frozenset(self._family_connections.get(family_id, ()))

    def connected_user_ids(self) -> list[int]:
        return sorted(self._user_connections)

    def stats(self) -> dict[str, int]:
        """Return counters describing the current presence state."""

        connection_ids: set[str] = set()
        for members in self._user_connections.values():
            connection_ids.update(members)
        for members in self._family_connections.values():
            connection_ids.update(members)
        return {
            "users": len(self._user_connections),
            "families": len(self._family_connections),
            "connections": len(connection_ids),
        }

    # Fan-out ----------------------------------------------------------------------

    def send_to_user(self, user_id: int, notification: NotificationPayload) -> int:
        """Deliver ``notification`` to every live connection of ``user_id``."""

        if self._transport is None:
            logger.error(_NOT_INITIALIZED_MESSAGE)
            return 0

        delivered = self._transport.emit_to_room(
            user_room(user_id), SocketEvent.NOTIFICATION, serialize_payload(notification)
        )
        logger.info(
            "Notification sent to user %s (notification_id=%s, recipients=%s)",
            user_id,
            notification.id,
            delivered,
        )
        return delivered

    def send_to_family(self, family_id: int, notification: NotificationPayload) -> int:
        """Deliver ``notification`` to every connection in the family room."""

        if self._transport is None:
            logger.error(_NOT_INITIALIZED_MESSAGE)
            return 0

        delivered = self._transport.emit_to_room(
            family_room(family_id), SocketEvent.NOTIFICATION, serialize_payload(notification)
        )
        logger.info(
            "Notification sent to family %s (notification_id=%s, recipients=%s)",
            family_id,
            notification.id,
            delivered,
        )
        return delivered

    def _broadcast_to_family(
        self, family_id: int, event: SocketEvent, payload: EventPayload
    ) -> int:
        if self._transport is None:
            logger.error(_NOT_INITIALIZED_MESSAGE)
            return 0

        delivered = self._transport.emit_to_room(
            family_room(family_id), event, serialize_payload(payload)
        )
        logger.info(
            "Event %s sent to family %s (id=%s, recipients=%s)",
            event.value,
            family_id,
            getattr(payload, "id", None),
            delivered,
        )
        return delivered

    def notify_budget_created(self, family_id: int, budget: BudgetLike) -> int:
        return self._broadcast_to_family(
            family_id, SocketEvent.BUDGET_CREATED, _budget_payload(budget)
        )

    def notify_budget_updated(self, family_id: int, budget: BudgetLike) -> int:
        return self._broadcast_to_family(
            family_id, SocketEvent.BUDGET_UPDATED, _budget_payload(budget)
        )

    def notify_budget_deleted(self, family_id: int, budget_id: int) -> int:
        return self._broadcast_to_family(
            family_id, SocketEvent.BUDGET_DELETED, DeletedPayload(id=budget_id)
        )

    def notify_expense_created(self, family_id: int, expense: ExpenseLike) -> int:
        return self._broadcast_to_family(
            family_id, SocketEvent.EXPENSE_CREATED, _expense_payload(expense)
        )

    def notify_expense_updated(self, family_id: int, expense: ExpenseLike) -> int:
        return self._broadcast_to_family(
            family_id, SocketEvent.EXPENSE_UPDATED, _expense_payload(expense)
        )

    def notify_expense_deleted(self, family_id: int, expense_id: int) -> int:
        return self._broadcast_to_family(
            family_id, SocketEvent.EXPENSE_DELETED, DeletedPayload(id=expense_id)
        )

    def notify_budget_shared(
        self, user_id: int, budget: BudgetLike, shared_by_name: str
    ) -> int:
        """Tell ``user_id`` that ``shared_by_name`` shared ``budget`` with them."""

        if self._transport is None:
            logger.error(_NOT_INITIALIZED_MESSAGE)
            return 0

        payload = _budget_payload(budget)
        notification = NotificationPayload(
            id=f"budget-shared-{int(time.time() * 1000)}-{uuid4().hex[:8]}",
            type=SocketEvent.BUDGET_SHARED.value,
            title="Budget shared",
            message=f"{shared_by_name} shared a budget with you: {payload.category}",
            timestamp=now_in_app_timezone(),
            read=False,
            data={"budget": serialize_payload(payload)},
        )
        return self.send_to_user(user_id, notification)


def _budget_payload(budget: BudgetLike) -> BudgetPayload:
    if isinstance(budget, BudgetPayload):
        return budget
    if isinstance(budget, Mapping):
        return BudgetPayload.from_mapping(budget)
    return BudgetPayload.from_budget(budget)


def _expense_payload(expense: ExpenseLike) -> ExpensePayload:
    if isinstance(expense, ExpensePayload):
        return expense
    if isinstance(expense, Mapping):
        return ExpensePayload.from_mapping(expense)
    return ExpensePayload.from_expense(expense)


__all__ = ["PresenceRegistry", "family_room", "user_room"]
