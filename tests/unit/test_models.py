"""Tests for the ledger data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from coldchain.models.oracle import ReadingSource
from coldchain.models.products import Product
from coldchain.models.shipments import (
    CLOSED_STATUSES,
    VALID_TRANSITIONS,
    EventType,
    Shipment,
    ShipmentEvent,
    ShipmentStatus,
)


def _product(**overrides) -> Product:
    fields = dict(
        name="Vaccine", manufacturer="m", min_temperature=2.0,
        max_temperature=8.0, logistics_partner="l",
    )
    fields.update(overrides)
    return Product(**fields)


class TestProduct:
    def test_ids_are_unique(self):
        assert _product().id != _product().id
        assert _product().id.startswith("prod-")

    def test_accepts_is_inclusive(self):
        p = _product()
        assert p.accepts(2.0)
        assert p.accepts(8.0)
        assert not p.accepts(1.9)
        assert not p.accepts(8.1)

    def test_frozen(self):
        p = _product()
        with pytest.raises(ValidationError):
            p.name = "other"


class TestShipment:
    def test_defaults(self):
        p = _product()
        s = Shipment(
            product_id=p.id, product=p, manufacturer="m",
            logistics_partner="l", consumer="c", escrow_amount=10,
        )
        assert s.status == ShipmentStatus.PENDING
        assert s.escrow_released is False
        assert s.events == ()
        assert s.delivered_at is None
        assert s.confirmed_at is None
        assert s.last_event_hash == ""
        assert s.accepts_events

    def test_status_values(self):
        assert [s.value for s in ShipmentStatus] == [
            "pending", "in_transit", "compromised", "delivered", "confirmed",
        ]


class TestShipmentEvent:
    def test_discrepancy(self):
        e = ShipmentEvent(
            location="Mumbai", temperature=4.0, verified_temperature=4.2,
            reporter="l", event_type=EventType.PICKUP, is_temperature_valid=True,
        )
        assert e.discrepancy == -0.2
        assert e.reading_source == ReadingSource.ORACLE

    def test_event_type_parses_from_string(self):
        e = ShipmentEvent(
            location="x", temperature=1, verified_temperature=1,
            reporter="l", event_type="delivery", is_temperature_valid=True,
        )
        assert e.event_type is EventType.DELIVERY


class TestTransitionTable:
    def test_terminal_and_sticky_have_no_exits(self):
        assert VALID_TRANSITIONS[ShipmentStatus.CONFIRMED] == set()
        assert VALID_TRANSITIONS[ShipmentStatus.COMPROMISED] == set()

    def test_only_delivered_reaches_confirmed(self):
        sources = {s for s, targets in VALID_TRANSITIONS.items() if ShipmentStatus.CONFIRMED in targets}
        assert sources == {ShipmentStatus.DELIVERED}

    def test_closed_statuses(self):
        assert CLOSED_STATUSES == {ShipmentStatus.COMPROMISED, ShipmentStatus.CONFIRMED}
