"""Product registry — immutable product specifications."""

from __future__ import annotations

import logging
import math

from coldchain.core.errors import InvalidSpecError
from coldchain.core.store import LedgerStore
from coldchain.models.products import Product, ProductSpec

logger = logging.getLogger(__name__)


class ProductRegistry:
    """Registers and looks up products.

    Parameters
    ----------
    store:
        The ledger store that owns product records.
    """

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def register_product(self, spec: ProductSpec) -> Product:
        """Validate *spec*, store a new Product and return it.

        Raises InvalidSpecError when the band is inverted or not finite, or
        when a required party reference is blank.
        """
        self._validate(spec)
        product = Product(**spec.model_dump())
        with self._store.insert_lock():
            self._store.add_product(product)
        logger.info(
            "Registered product %s (%s) band=[%s, %s] for %s",
            product.id, product.name, product.min_temperature,
            product.max_temperature, product.manufacturer,
        )
        return product

    def get_product(self, product_id: str) -> Product:
        return self._store.get_product(product_id)

    def list_products(self, manufacturer: str | None = None) -> list[Product]:
        """Products in insertion order, optionally for one manufacturer."""
        products = self._store.products()
        if manufacturer is None:
            return products
        return [p for p in products if p.manufacturer == manufacturer]

    @staticmethod
    def _validate(spec: ProductSpec) -> None:
        problems: list[str] = []
        if not spec.name.strip():
            problems.append("name must not be empty")
        if not spec.manufacturer.strip():
            problems.append("manufacturer must not be empty")
        if not spec.logistics_partner.strip():
            problems.append("logistics_partner must not be empty")
        if not (math.isfinite(spec.min_temperature) and math.isfinite(spec.max_temperature)):
            problems.append("temperature bounds must be finite")
        elif spec.min_temperature > spec.max_temperature:
            problems.append(
                f"min_temperature {spec.min_temperature} exceeds "
                f"max_temperature {spec.max_temperature}"
            )
        if problems:
            raise InvalidSpecError("Invalid product spec: " + "; ".join(problems))
