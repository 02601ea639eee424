"""Explicit ledger store: products and shipments keyed by id.

One ``LedgerStore`` owns every record for the lifetime of the process and is
injected into each component; there is no module-level state.

Design:
- Records are frozen Pydantic models.  A write replaces the whole record in
  one dict assignment, so readers never see a half-applied mutation and
  never need a lock.
- Writers serialise per shipment through ``shipment_lock(id)``; inserts go
  through a single store-wide lock.
- When ``db_path`` is given, every write is mirrored to SQLite (WAL mode)
  and the maps are reloaded from it on construction.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from coldchain.core.errors import NotFoundError
from coldchain.models.products import Product
from coldchain.models.shipments import Shipment

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_PRODUCTS = """
CREATE TABLE IF NOT EXISTS products (
    seq           INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id    TEXT NOT NULL UNIQUE,
    manufacturer  TEXT NOT NULL,
    document      TEXT NOT NULL
);
"""

_CREATE_SHIPMENTS = """
CREATE TABLE IF NOT EXISTS shipments (
    seq               INTEGER PRIMARY KEY AUTOINCREMENT,
    shipment_id       TEXT NOT NULL UNIQUE,
    status            TEXT NOT NULL,
    document          TEXT NOT NULL
);
"""


class LedgerStore:
    """In-process owner of all product and shipment records.

    Parameters
    ----------
    db_path:
        Optional SQLite file mirroring the store.  ``None`` keeps the store
        purely in memory.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self._products: dict[str, Product] = {}
        self._shipments: dict[str, Shipment] = {}
        self._insert_lock = threading.Lock()
        self._locks_guard = threading.Lock()
        self._shipment_locks: dict[str, threading.RLock] = {}

        self._db_path = Path(db_path) if db_path is not None else None
        if self._db_path is not None:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
            self._load()

    @property
    def db_path(self) -> Path | None:
        return self._db_path

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    @contextmanager
    def insert_lock(self) -> Iterator[None]:
        """Serialise record creation across the whole store."""
        with self._insert_lock:
            yield

    @contextmanager
    def shipment_lock(self, shipment_id: str) -> Iterator[None]:
        """Exclusive, re-entrant write access to one existing shipment.

        Locks exist only for stored shipments; an unknown id raises
        NotFoundError without allocating anything.
        """
        with self._locks_guard:
            lock = self._shipment_locks.get(shipment_id)
        if lock is None:
            raise NotFoundError(f"Shipment not found: {shipment_id}")
        with lock:
            yield

    def _register_lock(self, shipment_id: str) -> None:
        with self._locks_guard:
            self._shipment_locks[shipment_id] = threading.RLock()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def add_product(self, product: Product) -> Product:
        if product.id in self._products:
            raise ValueError(f"Duplicate product id {product.id!r}")
        self._persist_product(product)
        self._products[product.id] = product
        return product

    def get_product(self, product_id: str) -> Product:
        try:
            return self._products[product_id]
        except KeyError:
            raise NotFoundError(f"Product not found: {product_id}") from None

    def products(self) -> list[Product]:
        """All products in insertion order."""
        return list(self._products.values())

    # ------------------------------------------------------------------
    # Shipments
    # ------------------------------------------------------------------

    def add_shipment(self, shipment: Shipment) -> Shipment:
        if shipment.id in self._shipments:
            raise ValueError(f"Duplicate shipment id {shipment.id!r}")
        self._persist_shipment(shipment, insert=True)
        self._register_lock(shipment.id)
        self._shipments[shipment.id] = shipment
        return shipment

    def replace_shipment(self, shipment: Shipment) -> Shipment:
        """Swap in the new version of an existing shipment.

        Callers must hold ``shipment_lock(shipment.id)``.
        """
        if shipment.id not in self._shipments:
            raise NotFoundError(f"Shipment not found: {shipment.id}")
        self._persist_shipment(shipment, insert=False)
        self._shipments[shipment.id] = shipment
        return shipment

    def get_shipment(self, shipment_id: str) -> Shipment:
        try:
            return self._shipments[shipment_id]
        except KeyError:
            raise NotFoundError(f"Shipment not found: {shipment_id}") from None

    def shipments(self) -> list[Shipment]:
        """Snapshot of all shipments in creation order."""
        return list(self._shipments.values())

    # ------------------------------------------------------------------
    # SQLite mirror
    # ------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_PRODUCTS)
            conn.execute(_CREATE_SHIPMENTS)
            conn.commit()

    def _load(self) -> None:
        with self._connect() as conn:
            product_rows = conn.execute(
                "SELECT document FROM products ORDER BY seq ASC"
            ).fetchall()
            shipment_rows = conn.execute(
                "SELECT document FROM shipments ORDER BY seq ASC"
            ).fetchall()
        for (doc,) in product_rows:
            product = Product.model_validate_json(doc)
            self._products[product.id] = product
        for (doc,) in shipment_rows:
            shipment = Shipment.model_validate_json(doc)
            self._register_lock(shipment.id)
            self._shipments[shipment.id] = shipment
        logger.info(
            "Loaded %d products and %d shipments from %s",
            len(self._products), len(self._shipments), self._db_path,
        )

    def _persist_product(self, product: Product) -> None:
        if self._db_path is None:
            return
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO products (product_id, manufacturer, document) VALUES (?, ?, ?)",
                (product.id, product.manufacturer, product.model_dump_json()),
            )
            conn.commit()

    def _persist_shipment(self, shipment: Shipment, *, insert: bool) -> None:
        if self._db_path is None:
            return
        with self._connect() as conn:
            if insert:
                conn.execute(
                    "INSERT INTO shipments (shipment_id, status, document) VALUES (?, ?, ?)",
                    (shipment.id, shipment.status.value, shipment.model_dump_json()),
                )
            else:
                conn.execute(
                    "UPDATE shipments SET status = ?, document = ? WHERE shipment_id = ?",
                    (shipment.status.value, shipment.model_dump_json(), shipment.id),
                )
            conn.commit()
