"""Escrow ledger — one escrow per shipment, funded once, released once.

Funding is the only way a shipment comes into existence.  Release is the
``delivered -> confirmed`` transition and is reachable only through
``ShipmentStateMachine.confirm_delivery``.
"""

from __future__ import annotations

import logging
import math

from coldchain.core.errors import InvalidAmountError, InvalidSpecError, InvalidStateError
from coldchain.core.product_registry import ProductRegistry
from coldchain.core.store import LedgerStore
from coldchain.core.timestamps import utc_now
from coldchain.models.shipments import Shipment, ShipmentStatus

logger = logging.getLogger(__name__)


class EscrowLedger:
    """Creates funded shipments and releases their escrow.

    Parameters
    ----------
    store:
        The ledger store that owns shipment records.
    registry:
        Product lookups; funding requires an existing product.
    """

    def __init__(self, store: LedgerStore, registry: ProductRegistry) -> None:
        self._store = store
        self._registry = registry

    def fund_escrow(self, product_id: str, consumer: str, amount: float) -> Shipment:
        """Create a ``pending`` shipment holding *amount* in escrow.

        Raises NotFoundError for an unknown product and InvalidAmountError
        for a negative or non-finite amount; a blank consumer is an
        InvalidSpecError.
        """
        product = self._registry.get_product(product_id)
        if not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount < 0:
            raise InvalidAmountError(f"Escrow amount must be a finite number >= 0, got {amount!r}")
        if not consumer.strip():
            raise InvalidSpecError("Escrow must name a consumer")

        shipment = Shipment(
            product_id=product.id,
            product=product.model_copy(),
            manufacturer=product.manufacturer,
            logistics_partner=product.logistics_partner,
            consumer=consumer,
            escrow_amount=float(amount),
        )
        with self._store.insert_lock():
            self._store.add_shipment(shipment)
        logger.info(
            "Funded escrow %.2f for shipment %s (product %s, consumer %s)",
            shipment.escrow_amount, shipment.id, product.id, consumer,
        )
        return shipment

    def release_escrow(self, shipment_id: str) -> Shipment:
        """Release escrow and confirm a ``delivered`` shipment.

        Not repeatable: any status other than ``delivered``, including an
        already ``confirmed`` shipment, raises InvalidStateError.
        """
        with self._store.shipment_lock(shipment_id):
            shipment = self._store.get_shipment(shipment_id)
            if shipment.status != ShipmentStatus.DELIVERED:
                raise InvalidStateError(
                    f"Cannot release escrow for {shipment_id}: status is "
                    f"{shipment.status.value}, expected delivered"
                )
            released = shipment.model_copy(
                update={
                    "escrow_released": True,
                    "status": ShipmentStatus.CONFIRMED,
                    "confirmed_at": utc_now(),
                }
            )
            self._store.replace_shipment(released)

        logger.info(
            "Released escrow %.2f for shipment %s", released.escrow_amount, shipment_id
        )
        return released
