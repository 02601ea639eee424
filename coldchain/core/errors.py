"""Ledger error kinds.

Every mutation either completes or raises one of these before writing
anything, so a rejected call leaves prior state intact.
"""

from __future__ import annotations


class LedgerError(RuntimeError):
    """Base class for all cold-chain ledger errors."""


class NotFoundError(LedgerError):
    """Raised when a referenced product or shipment does not exist."""


class InvalidStateError(LedgerError):
    """Raised when an operation is not valid for the shipment's current status."""


class InvalidAmountError(LedgerError):
    """Raised when an escrow amount is negative or not a finite number."""


class InvalidSpecError(LedgerError):
    """Raised when a product specification is malformed."""


class OracleUnavailableError(LedgerError):
    """Raised by an oracle when no reading can be obtained.

    Never surfaced to callers of ``add_event``: the state machine absorbs
    it and falls back to a location-keyed estimate.
    """


class AuthorizationError(LedgerError):
    """Raised when the authorization policy refuses a gated action."""


class LedgerIntegrityError(LedgerError):
    """Raised when a shipment's event hash chain is broken."""
