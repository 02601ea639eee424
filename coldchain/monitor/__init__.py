"""Shipment monitor — Rich terminal rendering of ledger snapshots."""

from coldchain.monitor.renderer import ShipmentRenderer

__all__ = ["ShipmentRenderer"]
