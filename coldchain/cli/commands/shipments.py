"""Shipment commands: fund escrow, report events, confirm, inspect."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from coldchain.cli.commands._common import SecretOption, StoreOption, console, open_service
from coldchain.models.shipments import EventType
from coldchain.models.users import UserRole
from coldchain.monitor.renderer import ShipmentRenderer, status_markup


def fund_escrow_cmd(
    product_id: str = typer.Argument(..., help="Product to ship."),
    consumer: str = typer.Option(..., "--consumer", "-c", help="Consumer user id."),
    amount: float = typer.Option(..., "--amount", "-a", help="Escrow amount to hold."),
    secret: Optional[str] = SecretOption,
    store: Optional[Path] = StoreOption,
) -> None:
    """Fund escrow for a product, creating a pending shipment."""
    with open_service(store) as service:
        shipment = service.fund_escrow(product_id, consumer, amount, secret=secret)
    console.print(
        f"[bold green]Escrow funded[/bold green] {shipment.escrow_amount:,.2f} "
        f"for shipment {shipment.id}"
    )
    console.print(f"[bold]{shipment.id}[/bold]")


def add_event_cmd(
    shipment_id: str = typer.Argument(..., help="Shipment receiving the event."),
    location: str = typer.Option(..., "--location", "-L", help="Checkpoint place name."),
    temperature: float = typer.Option(..., "--temperature", "-t", help="Reported temperature (C)."),
    event_type: EventType = typer.Option(EventType.TRANSIT, "--type", "-T", help="Checkpoint kind."),
    reporter: str = typer.Option(..., "--reporter", "-r", help="Reporting party id."),
    secret: Optional[str] = SecretOption,
    store: Optional[Path] = StoreOption,
) -> None:
    """Report a chain-of-custody event for a shipment."""
    with open_service(store) as service:
        result = service.add_event(
            shipment_id, location, temperature, event_type, reporter, secret=secret
        )
    event = result.event
    verdict = "[green]within band[/green]" if event.is_temperature_valid else "[bold red]OUT OF BAND[/bold red]"
    console.print(
        f"Event {event.id}: verified {event.verified_temperature:.1f} C "
        f"({event.reading_source.value}) {verdict}"
    )
    console.print(f"Shipment status: {status_markup(result.shipment.status)}")


def confirm_cmd(
    shipment_id: str = typer.Argument(..., help="Delivered shipment to confirm."),
    store: Optional[Path] = StoreOption,
) -> None:
    """Confirm delivery and release the shipment's escrow."""
    with open_service(store) as service:
        shipment = service.confirm_delivery(shipment_id)
    console.print(
        f"[bold green]Delivery confirmed.[/bold green] Escrow "
        f"{shipment.escrow_amount:,.2f} released for {shipment.id}"
    )


def shipments_cmd(
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Only this user's shipments."),
    role: Optional[str] = typer.Option(
        None, "--role", "-R", help="Role of --user: manufacturer, logistics or consumer."
    ),
    store: Optional[Path] = StoreOption,
) -> None:
    """List shipments, optionally for one user and role."""
    if (user is None) != (role is None):
        console.print("[bold red]--user and --role must be given together.[/bold red]")
        raise typer.Exit(code=2)
    with open_service(store) as service:
        if user is not None and role is not None:
            shipments = service.shipments_by_user(user, role)
        else:
            shipments = service.list_shipments()
    if not shipments:
        console.print("[dim]No shipments found.[/dim]")
        return
    console.print(ShipmentRenderer(console).shipments_table(shipments))


def show_cmd(
    shipment_id: str = typer.Argument(..., help="Shipment to display."),
    store: Optional[Path] = StoreOption,
) -> None:
    """Show one shipment with its event timeline."""
    with open_service(store) as service:
        shipment = service.get_shipment(shipment_id)
        chain_valid = service.verify_events(shipment_id)
    ShipmentRenderer(console).print_shipment(shipment, chain_valid=chain_valid)


def verify_cmd(
    shipment_id: str = typer.Argument(..., help="Shipment whose event chain to verify."),
    store: Optional[Path] = StoreOption,
) -> None:
    """Verify a shipment's event hash chain."""
    with open_service(store) as service:
        service.verify_events(shipment_id)
    console.print(f"[green]Event chain for {shipment_id} is valid.[/green]")


def users_cmd(
    role: Optional[UserRole] = typer.Option(None, "--role", "-R", help="Filter by role."),
    store: Optional[Path] = StoreOption,
) -> None:
    """List known ledger users."""
    with open_service(store) as service:
        users = service.list_users(role)
    table = Table(title="Users", header_style="bold cyan")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Role")
    table.add_column("Address", style="dim")
    for u in users:
        table.add_row(u.id, u.name, u.role.value, u.address)
    console.print(table)
