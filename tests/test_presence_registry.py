"""Tests for presence bookkeeping and event fan-out in the registry."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from app.domain.entities import Budget
from app.infrastructure.notifications import NotificationPayload, PresenceRegistry


def _note(note_id: str = "n-1") -> NotificationPayload:
    return NotificationPayload(
        id=note_id,
        type="info",
        title="Hello",
        message="Something happened",
        timestamp=datetime(2024, 5, 1, 12, 0),
    )


def test_authenticate_joins_user_room_and_acknowledges(registry, transport):
    connection = transport.connect()

    connection.trigger("authenticate", {"userId": 7})

    assert registry.user_connections(7) == {connection.id}
    assert connection.data["user_id"] == 7
    assert "user:7" in connection.rooms
    assert connection.events("authenticated") == [{"userId": 7}]


def test_authenticate_accepts_snake_case_and_numeric_strings(registry, transport):
    connection = transport.connect()

    connection.trigger("authenticate", {"user_id": "12"})

    assert registry.user_connections(12) == {connection.id}


@pytest.mark.parametrize(
    "frame", [None, {}, {"userId": "abc"}, {"userId": True}, {"userId": "²"}, [7]]
)
def test_invalid_authenticate_frame_reports_error(registry, transport, frame):
    connection = transport.connect()

    connection.trigger("authenticate", frame)

    assert connection.events("error") == [{"message": "Invalid user id"}]
    assert registry.connected_user_ids() == []


def test_disconnect_prunes_empty_user_group(registry, transport):
    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 7})

    transport.disconnect(connection)

    assert registry.user_connections(7) == frozenset()
    assert 7 not in registry.connected_user_ids()


def test_disconnect_keeps_other_connections_of_the_user(registry, transport):
    first = transport.connect()
    second = transport.connect()
    first.trigger("authenticate", {"userId": 7})
    second.trigger("authenticate", {"userId": 7})

    transport.disconnect(first)

    assert registry.user_connections(7) == {second.id}


def test_join_before_authenticate_is_rejected(registry, transport):
    connection = transport.connect()

    connection.trigger("join_family", {"familyId": 42})

    assert connection.events("error") == [{"message": "Not authenticated"}]
    assert registry.family_connections(42) == frozenset()
    assert "family:42" not in connection.rooms


def test_join_and_leave_family(registry, transport):
    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 7})

    connection.trigger("join_family", {"familyId": 42})
    assert registry.family_connections(42) == {connection.id}

    connection.trigger("leave_family", {"familyId": 42})
    assert registry.family_connections(42) == frozenset()
    assert registry.stats()["families"] == 0


def test_leave_family_twice_is_a_no_op(registry, transport):
    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 7})
    connection.trigger("join_family", {"familyId": 42})

    registry.leave_family_room(connection, 42)
    registry.leave_family_room(connection, 42)

    assert registry.family_connections(42) == frozenset()
    assert connection.events("error") == []


def test_invalid_family_frame_reports_error(registry, transport):
    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 7})

    connection.trigger("join_family", {"familyId": "x"})

    assert connection.events("error") == [{"message": "Invalid family id"}]


def test_send_to_user_reaches_exactly_the_user_connections(registry, transport):
    mine = [transport.connect() for _ in range(3)]
    other = transport.connect()
    for connection in mine:
        connection.trigger("authenticate", {"userId": 7})
    other.trigger("authenticate", {"userId": 8})

    delivered = registry.send_to_user(7, _note())

    assert delivered == 3
    for connection in mine:
        assert [payload["id"] for payload in connection.events("notification")] == ["n-1"]
    assert other.events("notification") == []


def test_send_to_family_reaches_exactly_the_room(registry, transport):
    members = [transport.connect() for _ in range(2)]
    outsider = transport.connect()
    for index, connection in enumerate(members):
        connection.trigger("authenticate", {"userId": index + 1})
        connection.trigger("join_family", {"familyId": 42})
    outsider.trigger("authenticate", {"userId": 99})

    delivered = registry.send_to_family(42, _note())

    assert delivered == 2
    assert all(len(connection.events("notification")) == 1 for connection in members)
    assert outsider.events("notification") == []


def test_notification_payload_is_json_ready(registry, transport):
    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 7})

    registry.send_to_user(7, _note())

    (payload,) = connection.events("notification")
    assert payload["timestamp"] == "2024-05-01T12:00:00"
    assert payload["read"] is False
    assert payload["data"] == {}


def test_connection_in_two_families_receives_both_and_leaves_both(registry, transport):
    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 7})
    connection.trigger("join_family", {"familyId": 1})
    connection.trigger("join_family", {"familyId": 2})

    registry.notify_expense_deleted(1, 10)
    registry.notify_expense_deleted(2, 11)
    assert connection.events("expense_deleted") == [{"id": 10}, {"id": 11}]

    transport.disconnect(connection)
    assert registry.family_connections(1) == frozenset()
    assert registry.family_connections(2) == frozenset()
    assert registry.stats() == {"users": 0, "families": 0, "connections": 0}


def test_budget_created_reaches_family_only(registry, transport):
    member = transport.connect()
    member.trigger("authenticate", {"userId": 7})
    member.trigger("join_family", {"familyId": 42})
    bystander = transport.connect()
    bystander.trigger("authenticate", {"userId": 8})

    registry.notify_budget_created(42, {"id": 1, "category": "Food"})

    (payload,) = member.events("budget_created")
    assert payload["id"] == 1
    assert payload["category"] == "Food"
    assert bystander.emitted == [("authenticated", {"userId": 8})]


def test_budget_entity_is_serialized(registry, transport):
    member = transport.connect()
    member.trigger("authenticate", {"userId": 7})
    member.trigger("join_family", {"familyId": 3})
    budget = Budget(id=4, family_id=3, category="Rent", value=150000, date=datetime(2024, 6, 1))

    registry.notify_budget_updated(3, budget)

    assert member.events("budget_updated") == [
        {"id": 4, "category": "Rent", "family_id": 3, "value": 150000, "date": "2024-06-01T00:00:00"}
    ]


def test_budget_shared_notification(registry, transport):
    recipient = transport.connect()
    recipient.trigger("authenticate", {"userId": 9})

    delivered = registry.notify_budget_shared(9, {"id": 5, "category": "Rent"}, "Maria")

    assert delivered == 1
    (payload,) = recipient.events("notification")
    assert payload["type"] == "budget_shared"
    assert "Maria" in payload["message"]
    assert "Rent" in payload["message"]
    assert payload["read"] is False
    assert payload["id"].startswith("budget-shared-")
    assert payload["data"]["budget"]["id"] == 5


def test_shared_notification_ids_are_unique(registry, transport):
    recipient = transport.connect()
    recipient.trigger("authenticate", {"userId": 9})

    registry.notify_budget_shared(9, {"id": 5, "category": "Rent"}, "Maria")
    registry.notify_budget_shared(9, {"id": 5, "category": "Rent"}, "Maria")

    first, second = recipient.events("notification")
    assert first["id"] != second["id"]


def test_offline_user_gets_nothing_and_no_error(registry):
    assert registry.send_to_user(123, _note()) == 0
    assert registry.notify_budget_deleted(77, 1) == 0


def test_reauthenticate_moves_connection_to_new_user(registry, transport):
    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 7})

    connection.trigger("authenticate", {"userId": 8})

    assert registry.user_connections(7) == frozenset()
    assert registry.user_connections(8) == {connection.id}
    assert "user:7" not in connection.rooms
    assert registry.send_to_user(7, _note()) == 0


def test_reauthenticate_same_user_is_idempotent(registry, transport):
    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 7})
    connection.trigger("authenticate", {"userId": 7})

    assert registry.user_connections(7) == {connection.id}
    assert registry.stats()["connections"] == 1


def test_principal_restricts_authenticate(registry, transport):
    connection = transport.connect(principal_id=7)

    connection.trigger("authenticate", {"userId": 8})

    assert connection.events("error") == [{"message": "Not authorized"}]
    assert registry.user_connections(8) == frozenset()

    connection.trigger("authenticate", {"userId": 7})
    assert registry.user_connections(7) == {connection.id}


def test_sending_before_initialize_logs_and_returns(caplog):
    registry = PresenceRegistry()

    with caplog.at_level(logging.ERROR):
        assert registry.send_to_user(1, _note()) == 0
        assert registry.send_to_family(1, _note()) == 0
        assert registry.notify_budget_shared(1, {"id": 1, "category": "Food"}, "Ana") == 0

    assert "before the realtime service was initialized" in caplog.text


def test_initialize_is_idempotent_per_transport(transport):
    registry = PresenceRegistry()
    registry.initialize(transport)
    registry.initialize(transport)

    connection = transport.connect()
    connection.trigger("authenticate", {"userId": 1})

    assert connection.events("authenticated") == [{"userId": 1}]


def test_initialize_with_a_second_transport_fails(registry, transport):
    with pytest.raises(RuntimeError):
        registry.initialize(type(transport)())


def test_disconnect_of_anonymous_connection_is_a_no_op(registry, transport):
    connection = transport.connect()

    transport.disconnect(connection)

    assert registry.stats() == {"users": 0, "families": 0, "connections": 0}
