"""Helpers shared by CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console

from coldchain.config import settings
from coldchain.core.errors import LedgerError
from coldchain.core.service import ColdChainService

console = Console()

StoreOption = typer.Option(
    None,
    "--store",
    "-s",
    help="Path to the ledger SQLite database (defaults to COLDCHAIN_STORE_PATH).",
)

SecretOption = typer.Option(
    None,
    "--secret",
    help="Shared secret for the gated action, when a secret is configured.",
)


@contextmanager
def open_service(store: Path | None, *, persistent: bool = True) -> Iterator[ColdChainService]:
    """Yield a service bound to *store*, turning ledger errors into exit code 1.

    With ``persistent=False`` the ledger stays in memory, for commands that
    never touch stored records.
    """
    if not persistent:
        cfg = settings.model_copy(update={"store_path": None})
    elif store:
        cfg = settings.model_copy(update={"store_path": store})
    else:
        cfg = settings
    try:
        with ColdChainService(cfg) as service:
            yield service
    except LedgerError as exc:
        console.print(f"[bold red]{type(exc).__name__}:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc
