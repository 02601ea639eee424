"""Cold-chain ledger data models — all Pydantic v2, all frozen (immutable)."""

from coldchain.models.oracle import ReadingSource, TemperatureReading
from coldchain.models.products import Product, ProductSpec
from coldchain.models.shipments import (
    CLOSED_STATUSES,
    VALID_TRANSITIONS,
    EventAppendResult,
    EventType,
    Shipment,
    ShipmentEvent,
    ShipmentStatus,
)
from coldchain.models.users import User, UserRole

__all__ = [
    # oracle
    "ReadingSource",
    "TemperatureReading",
    # products
    "Product",
    "ProductSpec",
    # shipments
    "ShipmentStatus",
    "EventType",
    "ShipmentEvent",
    "Shipment",
    "EventAppendResult",
    "VALID_TRANSITIONS",
    "CLOSED_STATUSES",
    # users
    "User",
    "UserRole",
]
