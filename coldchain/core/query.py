"""Read-side projections over the ledger store.

The query layer holds no state of its own.  Stored shipments are frozen
and replaced whole on every write, so each record returned here is a
consistent snapshot even while writers are active.
"""

from __future__ import annotations

import logging

from coldchain.core.store import LedgerStore
from coldchain.models.shipments import Shipment, ShipmentEvent, ShipmentStatus
from coldchain.models.users import UserRole

logger = logging.getLogger(__name__)

_ROLE_FIELDS: dict[UserRole, str] = {
    UserRole.MANUFACTURER: "manufacturer",
    UserRole.LOGISTICS: "logistics_partner",
    UserRole.CONSUMER: "consumer",
}


class ShipmentQuery:
    """Dashboard-facing read operations."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def get_shipment(self, shipment_id: str) -> Shipment:
        return self._store.get_shipment(shipment_id)

    def list_shipments(self, status: ShipmentStatus | None = None) -> list[Shipment]:
        shipments = self._store.shipments()
        if status is None:
            return shipments
        return [s for s in shipments if s.status == status]

    def shipments_by_user(self, user_id: str, role: UserRole | str) -> list[Shipment]:
        """Shipments where *user_id* is the party for *role*.

        An unrecognised role yields an empty list rather than an error.
        """
        try:
            field = _ROLE_FIELDS[UserRole(role)]
        except ValueError:
            logger.debug("Unknown role %r in shipments_by_user; returning no results", role)
            return []
        return [s for s in self._store.shipments() if getattr(s, field) == user_id]

    @staticmethod
    def timeline(shipment: Shipment) -> list[ShipmentEvent]:
        """Events sorted by timestamp for display; storage order is untouched."""
        return sorted(shipment.events, key=lambda e: e.timestamp)
