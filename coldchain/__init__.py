"""Cold-chain shipment ledger.

Manufacturers register temperature-sensitive products and fund escrow per
shipment, logistics partners report custody events that are checked
against an independent temperature oracle, and consumers confirm delivery
to release escrow.
"""

__version__ = "0.1.0"
__description__ = "Cold-chain shipment ledger with oracle-verified custody events"

from coldchain.core.service import ColdChainService
from coldchain.cli.app import app as cli

__all__ = ["ColdChainService", "cli", "__version__"]
