"""Shared test fixtures for the cold-chain ledger."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from coldchain.config import LedgerSettings
from coldchain.core.authorization import AllowAllPolicy
from coldchain.core.escrow_ledger import EscrowLedger
from coldchain.core.oracle import FixedReadingOracle
from coldchain.core.product_registry import ProductRegistry
from coldchain.core.query import ShipmentQuery
from coldchain.core.service import ColdChainService
from coldchain.core.state_machine import ShipmentStateMachine
from coldchain.core.store import LedgerStore
from coldchain.models.products import Product, ProductSpec
from coldchain.models.shipments import Shipment

# Oracle readings used across tests.  The standard product band is [2, 8].
READINGS: dict[str, float] = {
    "Mumbai": 4.2,
    "Pune": 5.1,
    "Delhi": 6.0,
    "Nagpur": 15.0,
    "Leh": -3.0,
    "EdgeLow": 2.0,
    "EdgeHigh": 8.0,
}


@pytest.fixture
def store() -> LedgerStore:
    """Provide a fresh in-memory LedgerStore."""
    return LedgerStore()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger.db"


@pytest.fixture
def oracle() -> FixedReadingOracle:
    """Provide an oracle serving READINGS; other locations fail over to estimates."""
    return FixedReadingOracle(READINGS)


@pytest.fixture
def registry(store: LedgerStore) -> ProductRegistry:
    return ProductRegistry(store)


@pytest.fixture
def escrow(store: LedgerStore, registry: ProductRegistry) -> EscrowLedger:
    return EscrowLedger(store, registry)


@pytest.fixture
def state_machine(
    store: LedgerStore, escrow: EscrowLedger, oracle: FixedReadingOracle
) -> ShipmentStateMachine:
    return ShipmentStateMachine(store, escrow, oracle)


@pytest.fixture
def query(store: LedgerStore) -> ShipmentQuery:
    return ShipmentQuery(store)


@pytest.fixture
def service(store: LedgerStore, oracle: FixedReadingOracle) -> ColdChainService:
    """Provide a ColdChainService wired to the test store and oracle."""
    return ColdChainService(
        LedgerSettings(store_path=None, _env_file=None),
        store=store,
        oracle=oracle,
        policy=AllowAllPolicy(),
    )


@pytest.fixture
def make_spec() -> Callable[..., ProductSpec]:
    """Factory fixture: build a ProductSpec with a [2, 8] band by default."""

    def _factory(**overrides: Any) -> ProductSpec:
        defaults: dict[str, Any] = {
            "name": "Insulin Pens",
            "description": "Refrigerated pharmaceutical",
            "manufacturer": "manu-001",
            "min_temperature": 2.0,
            "max_temperature": 8.0,
            "logistics_partner": "logi-001",
        }
        defaults.update(overrides)
        return ProductSpec(**defaults)

    return _factory


@pytest.fixture
def product(registry: ProductRegistry, make_spec: Callable[..., ProductSpec]) -> Product:
    return registry.register_product(make_spec())


@pytest.fixture
def shipment(escrow: EscrowLedger, product: Product) -> Shipment:
    """A freshly funded, pending shipment with 50000 in escrow."""
    return escrow.fund_escrow(product.id, "cons-001", 50000)
