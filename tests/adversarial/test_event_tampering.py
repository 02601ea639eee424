"""Adversarial tests — event history tampering.

These tests verify that the event hash chain detects:
1. Rewritten readings (a bad temperature made to look good)
2. Deleted or reordered events
3. Events replayed from another shipment
4. Direct edits to the SQLite mirror
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest

from coldchain.core.errors import LedgerIntegrityError
from coldchain.core.escrow_ledger import EscrowLedger
from coldchain.core.oracle import FixedReadingOracle
from coldchain.core.product_registry import ProductRegistry
from coldchain.core.state_machine import ShipmentStateMachine
from coldchain.core.store import LedgerStore
from coldchain.models.shipments import EventType, Shipment


def _walk(state_machine: ShipmentStateMachine, shipment_id: str) -> None:
    state_machine.add_event(shipment_id, "Mumbai", 4.0, EventType.PICKUP, "logi-001")
    state_machine.add_event(shipment_id, "Pune", 5.0, EventType.TRANSIT, "logi-001")
    state_machine.add_event(shipment_id, "Delhi", 6.0, EventType.DELIVERY, "logi-001")


class TestInMemoryTampering:
    """Simulate a writer that bypasses the state machine."""

    @pytest.fixture
    def walked(self, state_machine: ShipmentStateMachine, shipment: Shipment, store: LedgerStore):
        _walk(state_machine, shipment.id)
        return store.get_shipment(shipment.id)

    def _swap_events(self, store: LedgerStore, shipment: Shipment, events) -> None:
        with store.shipment_lock(shipment.id):
            store.replace_shipment(shipment.model_copy(update={"events": tuple(events)}))

    def test_untouched_chain_verifies(self, state_machine, walked):
        assert state_machine.verify_events(walked.id) is True

    def test_rewritten_reading_detected(self, state_machine, store, walked):
        events = list(walked.events)
        events[1] = events[1].model_copy(update={"verified_temperature": 3.0})
        self._swap_events(store, walked, events)
        with pytest.raises(LedgerIntegrityError, match="Tampered"):
            state_machine.verify_events(walked.id)

    def test_flipped_validity_detected(self, state_machine, store, walked):
        events = list(walked.events)
        events[0] = events[0].model_copy(update={"is_temperature_valid": False})
        self._swap_events(store, walked, events)
        with pytest.raises(LedgerIntegrityError):
            state_machine.verify_events(walked.id)

    def test_deleted_event_detected(self, state_machine, store, walked):
        events = list(walked.events)
        del events[1]
        self._swap_events(store, walked, events)
        with pytest.raises(LedgerIntegrityError, match="Chain broken"):
            state_machine.verify_events(walked.id)

    def test_reordered_events_detected(self, state_machine, store, walked):
        events = list(walked.events)
        events[0], events[1] = events[1], events[0]
        self._swap_events(store, walked, events)
        with pytest.raises(LedgerIntegrityError):
            state_machine.verify_events(walked.id)

    def test_replayed_events_from_other_shipment_detected(
        self, state_machine, escrow: EscrowLedger, store, walked
    ):
        other = escrow.fund_escrow(walked.product_id, "cons-002", 10)
        self._swap_events(store, other, walked.events)
        with pytest.raises(LedgerIntegrityError):
            state_machine.verify_events(other.id)


class TestSqliteTampering:
    """Direct SQLite manipulation to simulate an attacker with DB access."""

    @pytest.fixture
    def seeded(self, tmp_path: Path, make_spec, oracle: FixedReadingOracle) -> tuple[Path, str]:
        db = tmp_path / "ledger.db"
        store = LedgerStore(db)
        registry = ProductRegistry(store)
        escrow = EscrowLedger(store, registry)
        machine = ShipmentStateMachine(store, escrow, oracle)
        product = registry.register_product(make_spec())
        shipment = escrow.fund_escrow(product.id, "cons-001", 100)
        _walk(machine, shipment.id)
        return db, shipment.id

    def _reopen(self, db: Path) -> ShipmentStateMachine:
        store = LedgerStore(db)
        registry = ProductRegistry(store)
        return ShipmentStateMachine(store, EscrowLedger(store, registry), FixedReadingOracle())

    def _rewrite(self, db: Path, shipment_id: str, mutate) -> None:
        conn = sqlite3.connect(str(db))
        (doc,) = conn.execute(
            "SELECT document FROM shipments WHERE shipment_id = ?", (shipment_id,)
        ).fetchone()
        data = json.loads(doc)
        mutate(data)
        conn.execute(
            "UPDATE shipments SET document = ? WHERE shipment_id = ?",
            (json.dumps(data), shipment_id),
        )
        conn.commit()
        conn.close()

    def test_clean_database_verifies(self, seeded):
        db, shipment_id = seeded
        assert self._reopen(db).verify_events(shipment_id) is True

    def test_edited_temperature_detected(self, seeded):
        db, shipment_id = seeded

        def mutate(data):
            data["events"][2]["verified_temperature"] = 7.9

        self._rewrite(db, shipment_id, mutate)
        with pytest.raises(LedgerIntegrityError):
            self._reopen(db).verify_events(shipment_id)

    def test_truncated_history_detected(self, seeded):
        db, shipment_id = seeded

        def mutate(data):
            data["events"] = data["events"][1:]

        self._rewrite(db, shipment_id, mutate)
        with pytest.raises(LedgerIntegrityError, match="Chain broken"):
            self._reopen(db).verify_events(shipment_id)
