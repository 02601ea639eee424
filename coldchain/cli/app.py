"""Main Typer application — imports and registers all CLI commands.

Entry point: ``coldchain`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.logging import RichHandler

from coldchain.cli.commands.demo import demo_cmd
from coldchain.cli.commands.products import products_cmd, register_product_cmd
from coldchain.cli.commands.shipments import (
    add_event_cmd,
    confirm_cmd,
    fund_escrow_cmd,
    shipments_cmd,
    show_cmd,
    users_cmd,
    verify_cmd,
)
from coldchain.cli.commands.weather import weather_cmd
from coldchain.config import settings

app = typer.Typer(
    name="coldchain",
    help="Cold-chain shipment ledger: products, escrow, custody events.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    """Route log records through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (defaults to COLDCHAIN_LOG_LEVEL)."
    ),
) -> None:
    configure_logging(log_level or settings.log_level)


# Register subcommands
app.command(name="products", help="List registered products.")(products_cmd)
app.command(name="register-product", help="Register a product.")(register_product_cmd)
app.command(name="fund-escrow", help="Fund escrow and create a shipment.")(fund_escrow_cmd)
app.command(name="add-event", help="Report a custody event.")(add_event_cmd)
app.command(name="confirm", help="Confirm delivery and release escrow.")(confirm_cmd)
app.command(name="shipments", help="List shipments.")(shipments_cmd)
app.command(name="show", help="Show one shipment.")(show_cmd)
app.command(name="verify", help="Verify a shipment's event chain.")(verify_cmd)
app.command(name="users", help="List known users.")(users_cmd)
app.command(name="weather", help="Show the verified temperature for a place.")(weather_cmd)
app.command(name="demo", help="Run an in-memory lifecycle demo.")(demo_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
