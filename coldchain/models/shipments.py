"""Shipment state machine models: statuses, events, shipments.

The valid status graph is encoded in ``VALID_TRANSITIONS`` and enforced by
the ShipmentStateMachine and EscrowLedger:

    pending -> in_transit -> {compromised | delivered} -> confirmed

``pending`` may also jump straight to ``delivered`` or ``compromised``, and a
``delivered`` shipment still becomes ``compromised`` on an out-of-band reading.
``compromised`` is sticky and ``confirmed`` is terminal.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from coldchain.core.timestamps import utc_now
from coldchain.models.oracle import ReadingSource
from coldchain.models.products import Product


class ShipmentStatus(str, Enum):
    """Lifecycle status of a shipment."""

    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    COMPROMISED = "compromised"
    DELIVERED = "delivered"
    CONFIRMED = "confirmed"


class EventType(str, Enum):
    """Chain-of-custody checkpoint kind."""

    PICKUP = "pickup"
    TRANSIT = "transit"
    DELIVERY = "delivery"


VALID_TRANSITIONS: dict[ShipmentStatus, set[ShipmentStatus]] = {
    ShipmentStatus.PENDING: {
        ShipmentStatus.IN_TRANSIT,
        ShipmentStatus.DELIVERED,
        ShipmentStatus.COMPROMISED,
    },
    ShipmentStatus.IN_TRANSIT: {ShipmentStatus.DELIVERED, ShipmentStatus.COMPROMISED},
    ShipmentStatus.DELIVERED: {ShipmentStatus.CONFIRMED, ShipmentStatus.COMPROMISED},
    ShipmentStatus.COMPROMISED: set(),  # sticky
    ShipmentStatus.CONFIRMED: set(),  # terminal
}

# Statuses in which add_event is rejected.
CLOSED_STATUSES: frozenset[ShipmentStatus] = frozenset({
    ShipmentStatus.COMPROMISED,
    ShipmentStatus.CONFIRMED,
})


def new_shipment_id() -> str:
    return f"ship-{uuid.uuid4().hex[:12]}"


def new_event_id() -> str:
    return f"evt-{uuid.uuid4().hex[:12]}"


class ShipmentEvent(BaseModel):
    """A single chain-of-custody record, immutable once appended.

    ``temperature`` is what the logistics partner reported and is kept for
    audit only.  ``is_temperature_valid`` is always judged against
    ``verified_temperature``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_event_id)
    timestamp: datetime = Field(default_factory=utc_now)
    location: str
    temperature: float
    verified_temperature: float
    reading_source: ReadingSource = ReadingSource.ORACLE
    reporter: str
    event_type: EventType
    is_temperature_valid: bool
    previous_event_hash: str = ""
    event_hash: str = ""  # computed on append, seals this event

    @property
    def discrepancy(self) -> float:
        """Reported minus verified temperature, rounded to one decimal."""
        return round(self.temperature - self.verified_temperature, 1)


class Shipment(BaseModel):
    """A funded shipment and its append-only event history."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_shipment_id)
    product_id: str
    product: Product  # snapshot at funding time
    manufacturer: str
    logistics_partner: str
    consumer: str
    status: ShipmentStatus = ShipmentStatus.PENDING
    escrow_amount: float
    escrow_released: bool = False
    events: tuple[ShipmentEvent, ...] = ()
    created_at: datetime = Field(default_factory=utc_now)
    delivered_at: datetime | None = None
    confirmed_at: datetime | None = None

    @property
    def last_event_hash(self) -> str:
        return self.events[-1].event_hash if self.events else ""

    @property
    def accepts_events(self) -> bool:
        return self.status not in CLOSED_STATUSES


class EventAppendResult(BaseModel):
    """Returned by ``add_event``: the new event and the updated shipment."""

    model_config = ConfigDict(frozen=True)

    event: ShipmentEvent
    shipment: Shipment
