"""Service facade — the boundary the dashboards and CLI talk to.

The ColdChainService wires together the LedgerStore, ProductRegistry,
EscrowLedger, ShipmentStateMachine, ShipmentQuery, UserDirectory and the
temperature oracle, and applies the authorization policy in front of every
gated mutation.  Create and append operations return the full updated
entity so callers can refresh without a second fetch.
"""

from __future__ import annotations

import logging
from typing import Any

from coldchain.config import LedgerSettings
from coldchain.core import authorization
from coldchain.core.authorization import (
    AllowAllPolicy,
    AuthorizationPolicy,
    SharedSecretPolicy,
    require_authorization,
)
from coldchain.core.directory import UserDirectory
from coldchain.core.escrow_ledger import EscrowLedger
from coldchain.core.errors import InvalidSpecError
from coldchain.core.oracle import OpenWeatherOracle, TemperatureOracle, verified_reading
from coldchain.core.product_registry import ProductRegistry
from coldchain.core.production_guard import enforce_production_constraints
from coldchain.core.query import ShipmentQuery
from coldchain.core.state_machine import ShipmentStateMachine
from coldchain.core.store import LedgerStore
from coldchain.models.oracle import TemperatureReading
from coldchain.models.products import Product, ProductSpec
from coldchain.models.shipments import EventAppendResult, EventType, Shipment
from coldchain.models.users import User, UserRole

logger = logging.getLogger(__name__)


def build_policy(settings: LedgerSettings) -> AuthorizationPolicy:
    """SharedSecretPolicy when any action secret is configured, else allow-all."""
    if any(settings.action_secrets.values()):
        return SharedSecretPolicy(settings.action_secrets)
    return AllowAllPolicy()


class ColdChainService:
    """Cold-chain ledger service.

    Parameters
    ----------
    settings:
        Runtime settings.  Uses ``LedgerSettings()`` defaults if not provided.
    store:
        Ledger store; built from ``settings.store_path`` if not provided.
    oracle:
        Temperature oracle; an ``OpenWeatherOracle`` from settings if not provided.
    policy:
        Authorization policy; derived from the configured secrets if not provided.
    directory:
        User directory; the demo users if not provided.
    """

    def __init__(
        self,
        settings: LedgerSettings | None = None,
        *,
        store: LedgerStore | None = None,
        oracle: TemperatureOracle | None = None,
        policy: AuthorizationPolicy | None = None,
        directory: UserDirectory | None = None,
    ) -> None:
        self.settings = settings or LedgerSettings()
        enforce_production_constraints(self.settings)

        self.store = store or LedgerStore(self.settings.store_path)
        self._owned_oracle: OpenWeatherOracle | None = None
        if oracle is None:
            oracle = self._owned_oracle = OpenWeatherOracle(
                self.settings.oracle_api_key,
                base_url=self.settings.oracle_base_url,
                country_code=self.settings.oracle_country_code,
                timeout_seconds=self.settings.oracle_timeout_seconds,
            )
        self.oracle = oracle
        self.policy = policy or build_policy(self.settings)
        self.directory = directory or UserDirectory()

        self.registry = ProductRegistry(self.store)
        self.escrow = EscrowLedger(self.store, self.registry)
        self.state_machine = ShipmentStateMachine(self.store, self.escrow, self.oracle)
        self.query = ShipmentQuery(self.store)

    def close(self) -> None:
        if self._owned_oracle is not None:
            self._owned_oracle.close()

    def __enter__(self) -> ColdChainService:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def register_product(self, spec: ProductSpec, *, secret: str | None = None) -> Product:
        require_authorization(self.policy, secret, authorization.REGISTER_PRODUCT)
        return self.registry.register_product(spec)

    def get_product(self, product_id: str) -> Product:
        return self.registry.get_product(product_id)

    def list_products(self, manufacturer: str | None = None) -> list[Product]:
        return self.registry.list_products(manufacturer)

    # ------------------------------------------------------------------
    # Shipments
    # ------------------------------------------------------------------

    def fund_escrow(
        self, product_id: str, consumer: str, amount: float, *, secret: str | None = None
    ) -> Shipment:
        require_authorization(self.policy, secret, authorization.FUND_ESCROW)
        return self.escrow.fund_escrow(product_id, consumer, amount)

    def add_event(
        self,
        shipment_id: str,
        location: str,
        reported_temperature: float,
        event_type: EventType | str,
        reporter: str,
        *,
        secret: str | None = None,
    ) -> EventAppendResult:
        require_authorization(self.policy, secret, authorization.ADD_EVENT)
        return self.state_machine.add_event(
            shipment_id, location, reported_temperature, event_type, reporter
        )

    def confirm_delivery(self, shipment_id: str) -> Shipment:
        return self.state_machine.confirm_delivery(shipment_id)

    def get_shipment(self, shipment_id: str) -> Shipment:
        return self.query.get_shipment(shipment_id)

    def list_shipments(self) -> list[Shipment]:
        return self.query.list_shipments()

    def shipments_by_user(self, user_id: str, role: UserRole | str) -> list[Shipment]:
        return self.query.shipments_by_user(user_id, role)

    def verify_events(self, shipment_id: str) -> bool:
        return self.state_machine.verify_events(shipment_id)

    # ------------------------------------------------------------------
    # Temperature
    # ------------------------------------------------------------------

    def get_temperature(self, location: str) -> TemperatureReading:
        """The reading ``add_event`` would verify against for *location*.

        Never fails on an oracle outage; the fallback estimate is returned
        instead, with ``source`` set to ``estimate``.
        """
        if not location.strip():
            raise InvalidSpecError("Location must not be empty")
        return verified_reading(self.oracle, location)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self, role: UserRole | None = None) -> list[User]:
        return self.directory.list_users(role)

    def get_user(self, user_id: str) -> User:
        return self.directory.get(user_id)
