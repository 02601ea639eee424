"""Production configuration guard.

Runs once when a ColdChainService is built and fails hard (raises
``ProductionConfigError``) if production-critical settings are missing.
Outside production it does nothing.
"""

from __future__ import annotations

import logging

from coldchain.config import LedgerSettings

logger = logging.getLogger(__name__)


class ProductionConfigError(RuntimeError):
    """Raised when production configuration constraints are violated.

    The service cannot safely start; the process should exit.
    """


def enforce_production_constraints(settings: LedgerSettings) -> None:
    """Validate production-critical settings, reporting all violations at once.

    Constraints enforced
    --------------------
    1. Debug mode must be disabled.
    2. Every gated action must have a shared secret.
    3. The oracle API key must be set, so verified readings are not all
       fallback estimates.
    """
    if not settings.is_production:
        return

    violations: list[str] = []

    if settings.debug:
        violations.append(
            "debug=True is not allowed in production. Set COLDCHAIN_DEBUG=false."
        )

    for action, secret in settings.action_secrets.items():
        if not secret:
            violations.append(
                f"No secret configured for action '{action}'. "
                f"Set COLDCHAIN_{action.upper()}_SECRET."
            )

    if not settings.oracle_api_key:
        violations.append(
            "Temperature oracle API key is required in production. "
            "Set COLDCHAIN_ORACLE_API_KEY."
        )

    if violations:
        msg = (
            "Production configuration guard failed.\n"
            + "\n".join(f"  - {v}" for v in violations)
        )
        logger.critical(msg)
        raise ProductionConfigError(msg)

    logger.info("Production configuration guard passed.")
