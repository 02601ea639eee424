"""``coldchain products`` and ``coldchain register-product``."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from coldchain.cli.commands._common import SecretOption, StoreOption, console, open_service
from coldchain.models.products import ProductSpec
from coldchain.monitor.renderer import ShipmentRenderer


def products_cmd(
    manufacturer: Optional[str] = typer.Option(
        None, "--manufacturer", "-m", help="Only show this manufacturer's products."
    ),
    store: Optional[Path] = StoreOption,
) -> None:
    """List registered products in registration order."""
    with open_service(store) as service:
        products = service.list_products(manufacturer)
    if not products:
        console.print("[dim]No products registered.[/dim]")
        return
    console.print(ShipmentRenderer(console).products_table(products))


def register_product_cmd(
    name: str = typer.Option(..., "--name", "-n", help="Product name."),
    manufacturer: str = typer.Option(..., "--manufacturer", "-m", help="Manufacturer user id."),
    logistics: str = typer.Option(..., "--logistics", "-l", help="Assigned logistics partner id."),
    min_temp: float = typer.Option(..., "--min", help="Minimum accepted temperature (C)."),
    max_temp: float = typer.Option(..., "--max", help="Maximum accepted temperature (C)."),
    description: str = typer.Option("", "--description", "-d", help="Free-text description."),
    secret: Optional[str] = SecretOption,
    store: Optional[Path] = StoreOption,
) -> None:
    """Register a temperature-sensitive product."""
    spec = ProductSpec(
        name=name,
        description=description,
        manufacturer=manufacturer,
        min_temperature=min_temp,
        max_temperature=max_temp,
        logistics_partner=logistics,
    )
    with open_service(store) as service:
        product = service.register_product(spec, secret=secret)
    console.print(f"[bold green]Registered product[/bold green] {product.id}")
    console.print(f"[bold]{product.id}[/bold]")
