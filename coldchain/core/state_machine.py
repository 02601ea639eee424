"""Shipment state machine — turns partner-reported events into status.

Enforces:
- Valid status transitions only (VALID_TRANSITIONS table)
- ``compromised`` is sticky and ``confirmed`` is terminal: neither accepts events
- Validity is judged on the oracle reading, never the reported value
- Event history is append-only and hash-chained
- Escrow release only from ``delivered``, exactly once
"""

from __future__ import annotations

import logging
import math

from coldchain.core.errors import InvalidSpecError, InvalidStateError
from coldchain.core.escrow_ledger import EscrowLedger
from coldchain.core.hasher import seal_event, verify_event_chain
from coldchain.core.oracle import TemperatureOracle, verified_reading
from coldchain.core.store import LedgerStore
from coldchain.models.shipments import (
    VALID_TRANSITIONS,
    EventAppendResult,
    EventType,
    Shipment,
    ShipmentEvent,
    ShipmentStatus,
)

logger = logging.getLogger(__name__)


def derive_next_status(
    current: ShipmentStatus, is_temperature_valid: bool, event_type: EventType
) -> ShipmentStatus:
    """Status after appending an event; first matching rule wins.

    1. An out-of-band reading compromises the shipment, even on delivery.
    2. A delivery event delivers it.
    3. The first accepted event moves ``pending`` to ``in_transit``.
    4. Otherwise the status is unchanged.
    """
    if not is_temperature_valid and current != ShipmentStatus.COMPROMISED:
        return ShipmentStatus.COMPROMISED
    if event_type == EventType.DELIVERY and current != ShipmentStatus.COMPROMISED:
        return ShipmentStatus.DELIVERED
    if current == ShipmentStatus.PENDING:
        return ShipmentStatus.IN_TRANSIT
    return current


class ShipmentStateMachine:
    """Owns the shipment lifecycle.

    Parameters
    ----------
    store:
        The ledger store holding shipments.
    escrow:
        Escrow ledger performing the release on confirmation.
    oracle:
        Independent temperature source consulted for every event.
    """

    def __init__(
        self, store: LedgerStore, escrow: EscrowLedger, oracle: TemperatureOracle
    ) -> None:
        self._store = store
        self._escrow = escrow
        self._oracle = oracle

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def add_event(
        self,
        shipment_id: str,
        location: str,
        reported_temperature: float,
        event_type: EventType | str,
        reporter: str,
    ) -> EventAppendResult:
        """Verify, append and apply one chain-of-custody event.

        The oracle is consulted before the shipment lock is taken so a slow
        lookup never blocks other writers; its failure is absorbed by the
        fallback estimate.  The shipment state is re-checked under the lock
        and the append plus status change land in a single store write.
        """
        kind = self._parse_event_type(event_type)
        if not location.strip():
            raise InvalidSpecError("Event location must not be empty")
        if not math.isfinite(reported_temperature):
            raise InvalidSpecError(f"Reported temperature must be finite, got {reported_temperature!r}")

        self._ensure_accepts_events(self._store.get_shipment(shipment_id))
        reading = verified_reading(self._oracle, location)

        with self._store.shipment_lock(shipment_id):
            shipment = self._store.get_shipment(shipment_id)
            self._ensure_accepts_events(shipment)

            is_valid = shipment.product.accepts(reading.temperature)
            event = seal_event(
                shipment.id,
                ShipmentEvent(
                    location=location,
                    temperature=float(reported_temperature),
                    verified_temperature=reading.temperature,
                    reading_source=reading.source,
                    reporter=reporter,
                    event_type=kind,
                    is_temperature_valid=is_valid,
                ),
                shipment.last_event_hash,
            )

            updates: dict[str, object] = {"events": shipment.events + (event,)}
            next_status = derive_next_status(shipment.status, is_valid, kind)
            if next_status != shipment.status:
                self._check_transition(shipment, next_status)
                updates["status"] = next_status
            if next_status == ShipmentStatus.DELIVERED and shipment.delivered_at is None:
                updates["delivered_at"] = event.timestamp

            updated = self._store.replace_shipment(shipment.model_copy(update=updates))

        if updated.status != shipment.status:
            logger.info(
                "Shipment %s: %s->%s on %s event at %s (verified %.1f, reported %.1f)",
                shipment_id, shipment.status.value, updated.status.value,
                kind.value, location, reading.temperature, reported_temperature,
            )
        else:
            logger.debug("Shipment %s: appended %s event %s", shipment_id, kind.value, event.id)
        return EventAppendResult(event=event, shipment=updated)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    def confirm_delivery(self, shipment_id: str) -> Shipment:
        """Confirm a ``delivered`` shipment and release its escrow.

        Raises InvalidStateError from any other status, so a second call
        after a successful confirmation fails and changes nothing.
        """
        with self._store.shipment_lock(shipment_id):
            shipment = self._store.get_shipment(shipment_id)
            if shipment.status != ShipmentStatus.DELIVERED:
                raise InvalidStateError(
                    f"Shipment {shipment_id} must be delivered before confirmation "
                    f"(status is {shipment.status.value})"
                )
            return self._escrow.release_escrow(shipment_id)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def verify_events(self, shipment_id: str) -> bool:
        """Check the shipment's event hash chain; raises LedgerIntegrityError."""
        shipment = self._store.get_shipment(shipment_id)
        return verify_event_chain(shipment.id, shipment.events)

    def get_available_transitions(self, shipment_id: str) -> set[ShipmentStatus]:
        """Statuses the shipment could move to next."""
        status = self._store.get_shipment(shipment_id).status
        return set(VALID_TRANSITIONS.get(status, set()))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_event_type(event_type: EventType | str) -> EventType:
        try:
            return EventType(event_type)
        except ValueError:
            allowed = ", ".join(e.value for e in EventType)
            raise InvalidSpecError(
                f"Unknown event type {event_type!r}; expected one of: {allowed}"
            ) from None

    @staticmethod
    def _ensure_accepts_events(shipment: Shipment) -> None:
        if not shipment.accepts_events:
            raise InvalidStateError(
                f"Shipment {shipment.id} is {shipment.status.value} and accepts no new events"
            )

    @staticmethod
    def _check_transition(shipment: Shipment, target: ShipmentStatus) -> None:
        allowed = VALID_TRANSITIONS.get(shipment.status, set())
        if target not in allowed:
            raise InvalidStateError(
                f"Cannot transition {shipment.id} from {shipment.status.value} to "
                f"{target.value}. Allowed: {sorted(s.value for s in allowed)}"
            )
