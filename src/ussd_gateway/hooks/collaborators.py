"""Interfaces to the systems behind the dialog: users and shipments.

The gateway only needs a narrow slice of each, expressed as protocols. The
in-memory implementations back the default application and the tests.
"""

import itertools
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Protocol, runtime_checkable

from ussd_gateway.hooks.pricing import generate_tracking_id


class ShipmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class UserRecord:
    user_id: str
    phone_number: str
    name: str = ""
    city: str = ""


@dataclass
class ShipmentRecord:
    tracking_id: str
    sender_phone: str
    recipient_name: str
    recipient_phone: str
    destination: str
    description: str
    weight_kg: Decimal
    transport_mode: str
    delivery_type: str
    payment_method: str
    total_price: Decimal
    status: ShipmentStatus = ShipmentStatus.PENDING
    sender_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@runtime_checkable
class UserDirectory(Protocol):
    async def find_by_phone(self, phone_number: str) -> UserRecord | None: ...


@runtime_checkable
class ShipmentRepository(Protocol):
    async def next_tracking_id(self) -> str: ...

    async def save(self, shipment: ShipmentRecord) -> ShipmentRecord: ...

    async def find_by_tracking_id(self, tracking_id: str) -> ShipmentRecord | None: ...


class InMemoryUserDirectory:
    def __init__(self, users: list[UserRecord] | None = None) -> None:
        self._by_phone = {user.phone_number: user for user in users or []}

    def add(self, user: UserRecord) -> None:
        self._by_phone[user.phone_number] = user

    async def find_by_phone(self, phone_number: str) -> UserRecord | None:
        return self._by_phone.get(phone_number)


class InMemoryShipmentRepository:
    """Shipments kept in a dict, tracking ids drawn from a process-wide sequence."""

    def __init__(self, today: date | None = None) -> None:
        self._shipments: dict[str, ShipmentRecord] = {}
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()
        self._today = today

    async def next_tracking_id(self) -> str:
        with self._lock:
            sequence = next(self._sequence)
        return generate_tracking_id(sequence, self._today)

    async def save(self, shipment: ShipmentRecord) -> ShipmentRecord:
        self._shipments[shipment.tracking_id] = shipment
        return shipment

    async def find_by_tracking_id(self, tracking_id: str) -> ShipmentRecord | None:
        return self._shipments.get(tracking_id.strip().upper())

    def __len__(self) -> int:
        return len(self._shipments)
