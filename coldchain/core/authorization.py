"""Pluggable authorization for gated ledger actions.

The ledger core never holds secrets.  The service facade asks an
``AuthorizationPolicy`` before each gated mutation; a real credential or
RBAC system slots in by implementing ``verify``.
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from coldchain.core.errors import AuthorizationError

logger = logging.getLogger(__name__)

REGISTER_PRODUCT = "register_product"
FUND_ESCROW = "fund_escrow"
ADD_EVENT = "add_event"

GATED_ACTIONS: tuple[str, ...] = (REGISTER_PRODUCT, FUND_ESCROW, ADD_EVENT)


@runtime_checkable
class AuthorizationPolicy(Protocol):
    """``verify(secret, action) -> bool``."""

    def verify(self, secret: str | None, action: str) -> bool: ...


class AllowAllPolicy:
    """Accepts every action.  Development default."""

    def verify(self, secret: str | None, action: str) -> bool:
        return True


class SharedSecretPolicy:
    """One shared secret per action, compared in constant time.

    Actions without a configured secret are refused.
    """

    def __init__(self, secrets: Mapping[str, str]) -> None:
        self._secrets = {action: value for action, value in secrets.items() if value}

    def verify(self, secret: str | None, action: str) -> bool:
        expected = self._secrets.get(action)
        if expected is None or secret is None:
            return False
        return hmac.compare_digest(expected.encode("utf-8"), secret.encode("utf-8"))


def require_authorization(
    policy: AuthorizationPolicy, secret: str | None, action: str
) -> None:
    """Raise AuthorizationError unless *policy* accepts *action*."""
    if not policy.verify(secret, action):
        logger.warning("Authorization refused for action %r", action)
        raise AuthorizationError(f"Not authorized to perform {action!r}")
