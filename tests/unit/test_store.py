"""Tests for the LedgerStore and its SQLite mirror."""

from __future__ import annotations

from pathlib import Path

import pytest

from coldchain.core.errors import NotFoundError
from coldchain.core.escrow_ledger import EscrowLedger
from coldchain.core.oracle import FixedReadingOracle
from coldchain.core.product_registry import ProductRegistry
from coldchain.core.state_machine import ShipmentStateMachine
from coldchain.core.store import LedgerStore
from coldchain.models.products import ProductSpec
from coldchain.models.shipments import EventType, ShipmentStatus


class TestInMemory:
    def test_missing_records(self, store: LedgerStore):
        with pytest.raises(NotFoundError):
            store.get_product("prod-x")
        with pytest.raises(NotFoundError):
            store.get_shipment("ship-x")

    def test_duplicate_product_rejected(self, store: LedgerStore, product):
        with pytest.raises(ValueError):
            store.add_product(product)

    def test_replace_unknown_shipment(self, store: LedgerStore, shipment):
        other = shipment.model_copy(update={"id": "ship-other"})
        with pytest.raises(NotFoundError):
            store.replace_shipment(other)

    def test_no_db_path(self, store: LedgerStore):
        assert store.db_path is None


class TestShipmentLocks:
    def test_unknown_id_allocates_no_lock(self, store: LedgerStore):
        for i in range(100):
            with pytest.raises(NotFoundError):
                with store.shipment_lock(f"ship-missing-{i}"):
                    pass
        assert store._shipment_locks == {}

    def test_confirm_unknown_allocates_no_lock(self, store: LedgerStore, state_machine, shipment):
        for i in range(100):
            with pytest.raises(NotFoundError):
                state_machine.confirm_delivery(f"ship-missing-{i}")
        assert set(store._shipment_locks) == {shipment.id}

    def test_lock_is_reentrant(self, store: LedgerStore, shipment):
        with store.shipment_lock(shipment.id):
            with store.shipment_lock(shipment.id):
                assert store.get_shipment(shipment.id) == shipment

    def test_reloaded_shipments_get_locks(self, db_path: Path):
        first = LedgerStore(db_path)
        registry = ProductRegistry(first)
        product = registry.register_product(
            ProductSpec(name="P", manufacturer="m", min_temperature=2, max_temperature=8,
                        logistics_partner="l")
        )
        shipment = EscrowLedger(first, registry).fund_escrow(product.id, "c", 1)

        reloaded = LedgerStore(db_path)
        assert set(reloaded._shipment_locks) == {shipment.id}
        with reloaded.shipment_lock(shipment.id):
            pass


class TestSqliteMirror:
    def _populate(self, db_path: Path):
        store = LedgerStore(db_path)
        registry = ProductRegistry(store)
        escrow = EscrowLedger(store, registry)
        machine = ShipmentStateMachine(store, escrow, FixedReadingOracle({"Mumbai": 4.2}))
        spec_kwargs = dict(
            name="Vaccine", manufacturer="m", min_temperature=2,
            max_temperature=8, logistics_partner="l",
        )
        product = registry.register_product(ProductSpec(**spec_kwargs))
        shipment = escrow.fund_escrow(product.id, "c", 100)
        machine.add_event(shipment.id, "Mumbai", 4.0, EventType.PICKUP, "l")
        machine.add_event(shipment.id, "Mumbai", 4.0, EventType.DELIVERY, "l")
        return store, machine, shipment.id

    def test_creates_database(self, db_path: Path):
        LedgerStore(db_path)
        assert db_path.exists()

    def test_reload_restores_state(self, db_path: Path):
        original, _, shipment_id = self._populate(db_path)
        reloaded = LedgerStore(db_path)
        assert reloaded.products() == original.products()
        assert reloaded.get_shipment(shipment_id) == original.get_shipment(shipment_id)
        assert reloaded.get_shipment(shipment_id).status == ShipmentStatus.DELIVERED

    def test_reloaded_chain_verifies(self, db_path: Path):
        _, _, shipment_id = self._populate(db_path)
        reloaded = LedgerStore(db_path)
        registry = ProductRegistry(reloaded)
        machine = ShipmentStateMachine(reloaded, EscrowLedger(reloaded, registry), FixedReadingOracle())
        assert machine.verify_events(shipment_id) is True

    def test_reloaded_store_continues_lifecycle(self, db_path: Path):
        _, _, shipment_id = self._populate(db_path)
        reloaded = LedgerStore(db_path)
        registry = ProductRegistry(reloaded)
        machine = ShipmentStateMachine(reloaded, EscrowLedger(reloaded, registry), FixedReadingOracle())
        machine.confirm_delivery(shipment_id)
        assert LedgerStore(db_path).get_shipment(shipment_id).escrow_released is True
