"""Rich terminal renderer for products and shipments.

Color scheme
------------
- dim        : PENDING
- yellow     : IN_TRANSIT
- bold red   : COMPROMISED
- cyan       : DELIVERED
- green      : CONFIRMED
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from coldchain.core.timestamps import to_iso
from coldchain.models.products import Product
from coldchain.models.shipments import Shipment, ShipmentStatus


# ---------------------------------------------------------------------------
# Status -> Rich style mapping
# ---------------------------------------------------------------------------

_STATUS_STYLES: dict[ShipmentStatus, str] = {
    ShipmentStatus.PENDING: "dim",
    ShipmentStatus.IN_TRANSIT: "yellow",
    ShipmentStatus.COMPROMISED: "bold red",
    ShipmentStatus.DELIVERED: "cyan",
    ShipmentStatus.CONFIRMED: "green",
}


def status_markup(status: ShipmentStatus) -> str:
    style = _STATUS_STYLES.get(status, "")
    label = status.value.replace("_", " ").upper()
    return f"[{style}]{label}[/{style}]"


class ShipmentRenderer:
    """Renders ledger records as Rich tables and panels.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def products_table(self, products: list[Product]) -> Table:
        table = Table(title="Registered Products", header_style="bold cyan")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Band (C)", justify="center")
        table.add_column("Manufacturer")
        table.add_column("Logistics")
        table.add_column("Registered", style="dim")
        for p in products:
            table.add_row(
                p.id,
                p.name,
                f"{p.min_temperature:g} .. {p.max_temperature:g}",
                p.manufacturer,
                p.logistics_partner,
                to_iso(p.registered_at),
            )
        return table

    def shipments_table(self, shipments: list[Shipment]) -> Table:
        table = Table(title="Shipments", header_style="bold cyan")
        table.add_column("ID", style="cyan")
        table.add_column("Product")
        table.add_column("Status", justify="center")
        table.add_column("Escrow", justify="right")
        table.add_column("Released", justify="center")
        table.add_column("Events", justify="right")
        for s in shipments:
            released = "[green]Yes[/green]" if s.escrow_released else "[dim]No[/dim]"
            table.add_row(
                s.id,
                s.product.name,
                status_markup(s.status),
                f"{s.escrow_amount:,.2f}",
                released,
                str(len(s.events)),
            )
        return table

    def shipment_panel(self, shipment: Shipment, *, chain_valid: bool | None = None) -> Panel:
        """A shipment's summary and its event timeline."""
        events = Table(show_header=True, header_style="bold cyan", expand=True)
        events.add_column("Time", style="dim")
        events.add_column("Type")
        events.add_column("Location")
        events.add_column("Reported", justify="right")
        events.add_column("Verified", justify="right")
        events.add_column("Source", style="dim")
        events.add_column("Valid", justify="center")

        for e in sorted(shipment.events, key=lambda ev: ev.timestamp):
            valid = "[green]OK[/green]" if e.is_temperature_valid else "[bold red]OUT[/bold red]"
            events.add_row(
                to_iso(e.timestamp),
                e.event_type.value,
                e.location,
                f"{e.temperature:.1f}",
                f"{e.verified_temperature:.1f}",
                e.reading_source.value,
                valid,
            )

        summary_parts: list[str] = [
            f"[bold]Status:[/bold] {status_markup(shipment.status)}",
            f"[bold]Band:[/bold] {shipment.product.min_temperature:g}..{shipment.product.max_temperature:g} C",
            f"[bold]Escrow:[/bold] {shipment.escrow_amount:,.2f}"
            + (" [green](released)[/green]" if shipment.escrow_released else ""),
            f"[bold]Parties:[/bold] {shipment.manufacturer} -> "
            f"{shipment.logistics_partner} -> {shipment.consumer}",
        ]
        if chain_valid is not None:
            chain = "[green]valid[/green]" if chain_valid else "[bold red]BROKEN[/bold red]"
            summary_parts.append(f"[bold]Chain:[/bold] {chain}")

        return Panel(
            Group(Text.from_markup("  |  ".join(summary_parts)), Text(""), events),
            title=f"[bold]{shipment.id}[/bold] {shipment.product.name}",
            subtitle=f"Created {to_iso(shipment.created_at)}",
            border_style="blue",
            padding=(1, 2),
        )

    def print_shipment(self, shipment: Shipment, *, chain_valid: bool | None = None) -> None:
        self.console.print(self.shipment_panel(shipment, chain_valid=chain_valid))
