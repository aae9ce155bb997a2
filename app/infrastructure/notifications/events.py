"""Event names and typed payloads exchanged over the realtime channel."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Union

from app.domain.entities import Budget, Expense


class SocketEvent(str, Enum):
    """Names of the frames understood or produced by the realtime channel."""

    CONNECT = "connect"
    DISCONNECT = "disconnect"

    AUTHENTICATE = "authenticate"
    AUTHENTICATED = "authenticated"

    JOIN_FAMILY = "join_family"
    LEAVE_FAMILY = "leave_family"

    ERROR = "error"
    NOTIFICATION = "notification"

    BUDGET_CREATED = "budget_created"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_DELETED = "budget_deleted"
    BUDGET_SHARED = "budget_shared"

    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"


def event_name(event: SocketEvent | str) -> str:
    """Return the wire name for ``event``."""

    if isinstance(event, SocketEvent):
        return event.value
    return str(event)


@dataclass(frozen=True)
class BudgetPayload:
    """Fields of a budget that clients need to refresh their views."""

    id: int
    category: str
    family_id: int | None = None
    value: int | None = None
    date: datetime | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BudgetPayload":
        return cls(
            id=data["id"],
            category=data["category"],
            family_id=data.get("family_id", data.get("familyId")),
            value=data.get("value"),
            date=data.get("date"),
        )

    @classmethod
    def from_budget(cls, budget: Budget) -> "BudgetPayload":
        return cls(
            id=budget.id,
            family_id=budget.family_id,
            category=budget.category,
            value=budget.value,
            date=budget.date,
        )


@dataclass(frozen=True)
class ExpensePayload:
    """Fields of an expense that clients need to refresh their views."""

    id: int
    category: str
    family_id: int | None = None
    value: int | None = None
    date: datetime | None = None
    description: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ExpensePayload":
        return cls(
            id=data["id"],
            category=data["category"],
            family_id=data.get("family_id", data.get("familyId")),
            value=data.get("value"),
            date=data.get("date"),
            description=data.get("description"),
        )

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpensePayload":
        return cls(
            id=expense.id,
            family_id=expense.family_id,
            category=expense.category,
            value=expense.value,
            date=expense.date,
            description=expense.description,
        )


@dataclass(frozen=True)
class DeletedPayload:
    """Identifier of a removed budget or expense."""

    id: int


@dataclass(frozen=True)
class NotificationPayload:
    """Generic user facing notification."""

    id: str
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool = False
    data: dict[str, Any] = field(default_factory=dict)


EventPayload = Union[BudgetPayload, ExpensePayload, DeletedPayload, NotificationPayload]


def serialize_payload(payload: EventPayload) -> dict[str, Any]:
    """Return a JSON-serializable representation of ``payload``."""

    if not is_dataclass(payload):
        raise TypeError(f"Unsupported event payload: {type(payload).__name__}")
    data = asdict(payload)
    _normalize_datetime_values(data)
    return data


def _normalize_datetime_values(data: dict[str, Any] | list[Any]) -> None:
    """Convert ``datetime`` instances nested inside ``data`` into ISO strings."""

    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, (datetime, date)):
                data[key] = value.isoformat()
            elif isinstance(value, (dict, list)):
                _normalize_datetime_values(value)
    elif isinstance(data, list):
        for index, item in enumerate(data):
            if isinstance(item, (datetime, date)):
                data[index] = item.isoformat()
            elif isinstance(item, (dict, list)):
                _normalize_datetime_values(item)


__all__ = [
    "BudgetPayload",
    "DeletedPayload",
    "EventPayload",
    "ExpensePayload",
    "NotificationPayload",
    "SocketEvent",
    "event_name",
    "serialize_payload",
]
