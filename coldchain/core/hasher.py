"""Canonical hashing for the per-shipment event chain.

Each appended event carries the hash of its predecessor and a seal over
its own canonical JSON form, so any later edit to a stored event is
detectable by ``verify_event_chain``.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from typing import Any

from coldchain.core.errors import LedgerIntegrityError
from coldchain.models.shipments import ShipmentEvent


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_event_hash(shipment_id: str, event_dict: dict[str, Any]) -> str:
    """SHA-256 of a shipment event (excluding the event_hash field itself).

    The shipment id is mixed in so an event cannot be replayed into a
    different shipment's chain.
    """
    d = {k: v for k, v in event_dict.items() if k != "event_hash"}
    return sha256_hex(canonical_json_bytes({"shipment_id": shipment_id, "event": d}))


def seal_event(shipment_id: str, event: ShipmentEvent, previous_hash: str) -> ShipmentEvent:
    """Return *event* linked to *previous_hash* and sealed with its own hash."""
    linked = event.model_copy(update={"previous_event_hash": previous_hash, "event_hash": ""})
    event_hash = compute_event_hash(shipment_id, linked.model_dump(mode="json"))
    return linked.model_copy(update={"event_hash": event_hash})


def verify_event_chain(shipment_id: str, events: Sequence[ShipmentEvent]) -> bool:
    """Walk *events* in order and check every link and seal.

    Returns True if the chain is valid, raises LedgerIntegrityError otherwise.
    """
    prev_hash = ""
    for event in events:
        if event.previous_event_hash != prev_hash:
            raise LedgerIntegrityError(
                f"Chain broken at event {event.id}: "
                f"expected previous_hash={prev_hash!r}, "
                f"got {event.previous_event_hash!r}"
            )
        expected = compute_event_hash(shipment_id, event.model_dump(mode="json"))
        if event.event_hash != expected:
            raise LedgerIntegrityError(
                f"Tampered event {event.id}: "
                f"expected hash={expected!r}, got {event.event_hash!r}"
            )
        prev_hash = event.event_hash
    return True
