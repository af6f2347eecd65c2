"""Business hooks and the collaborators they talk to."""

from ussd_gateway.hooks.collaborators import (
    InMemoryShipmentRepository,
    InMemoryUserDirectory,
    ShipmentRecord,
    ShipmentRepository,
    ShipmentStatus,
    UserDirectory,
    UserRecord,
)
from ussd_gateway.hooks.delivery import register_delivery_hooks
from ussd_gateway.hooks.registry import HookRegistry

__all__ = [
    "HookRegistry",
    "InMemoryShipmentRepository",
    "InMemoryUserDirectory",
    "ShipmentRecord",
    "ShipmentRepository",
    "ShipmentStatus",
    "UserDirectory",
    "UserRecord",
    "register_delivery_hooks",
]
