"""Tests for the EscrowLedger — funding and one-shot release."""

from __future__ import annotations

import pytest

from coldchain.core.errors import (
    InvalidAmountError,
    InvalidSpecError,
    InvalidStateError,
    NotFoundError,
)
from coldchain.core.escrow_ledger import EscrowLedger
from coldchain.core.store import LedgerStore
from coldchain.models.products import Product
from coldchain.models.shipments import Shipment, ShipmentStatus


class TestFundEscrow:
    def test_creates_pending_shipment(self, escrow: EscrowLedger, product: Product):
        s = escrow.fund_escrow(product.id, "cons-001", 50000)
        assert s.status == ShipmentStatus.PENDING
        assert s.escrow_amount == 50000
        assert s.escrow_released is False
        assert s.events == ()
        assert s.product == product
        assert (s.manufacturer, s.logistics_partner, s.consumer) == (
            "manu-001", "logi-001", "cons-001",
        )

    def test_zero_amount_allowed(self, escrow: EscrowLedger, product: Product):
        assert escrow.fund_escrow(product.id, "c", 0).escrow_amount == 0

    @pytest.mark.parametrize("amount", [-0.01, float("nan"), float("inf")])
    def test_bad_amount_rejected(self, escrow: EscrowLedger, store: LedgerStore, product: Product, amount):
        with pytest.raises(InvalidAmountError):
            escrow.fund_escrow(product.id, "c", amount)
        assert store.shipments() == []

    def test_unknown_product(self, escrow: EscrowLedger):
        with pytest.raises(NotFoundError):
            escrow.fund_escrow("prod-missing", "c", 10)

    def test_blank_consumer_rejected(self, escrow: EscrowLedger, product: Product):
        with pytest.raises(InvalidSpecError):
            escrow.fund_escrow(product.id, " ", 10)

    def test_unique_ids(self, escrow: EscrowLedger, product: Product):
        ids = {escrow.fund_escrow(product.id, "c", 1).id for _ in range(5)}
        assert len(ids) == 5


class TestReleaseEscrow:
    def _deliver(self, store: LedgerStore, shipment: Shipment) -> Shipment:
        delivered = shipment.model_copy(update={"status": ShipmentStatus.DELIVERED})
        return store.replace_shipment(delivered)

    def test_release_from_delivered(self, escrow: EscrowLedger, store: LedgerStore, shipment: Shipment):
        self._deliver(store, shipment)
        released = escrow.release_escrow(shipment.id)
        assert released.status == ShipmentStatus.CONFIRMED
        assert released.escrow_released is True
        assert released.confirmed_at is not None
        assert store.get_shipment(shipment.id) == released

    def test_second_release_fails(self, escrow: EscrowLedger, store: LedgerStore, shipment: Shipment):
        self._deliver(store, shipment)
        first = escrow.release_escrow(shipment.id)
        with pytest.raises(InvalidStateError):
            escrow.release_escrow(shipment.id)
        assert store.get_shipment(shipment.id) == first

    @pytest.mark.parametrize(
        "status", [ShipmentStatus.PENDING, ShipmentStatus.IN_TRANSIT, ShipmentStatus.COMPROMISED]
    )
    def test_release_requires_delivered(self, escrow: EscrowLedger, store: LedgerStore, shipment: Shipment, status):
        store.replace_shipment(shipment.model_copy(update={"status": status}))
        with pytest.raises(InvalidStateError):
            escrow.release_escrow(shipment.id)
        assert store.get_shipment(shipment.id).escrow_released is False

    def test_release_unknown_shipment(self, escrow: EscrowLedger):
        with pytest.raises(NotFoundError):
            escrow.release_escrow("ship-missing")
