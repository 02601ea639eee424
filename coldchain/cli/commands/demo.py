"""``coldchain demo`` — walk a shipment through the full lifecycle.

Runs entirely in memory with a fixed-reading oracle, so it needs neither a
database nor network access.  Two shipments are created: one stays in band
and is confirmed, the other is compromised in transit.
"""

from __future__ import annotations

import time

import typer
from rich.panel import Panel

from coldchain.cli.commands._common import console
from coldchain.config import LedgerSettings
from coldchain.core.authorization import AllowAllPolicy
from coldchain.core.errors import InvalidStateError
from coldchain.core.oracle import FixedReadingOracle
from coldchain.core.service import ColdChainService
from coldchain.core.store import LedgerStore
from coldchain.models.products import ProductSpec
from coldchain.models.shipments import EventType
from coldchain.monitor.renderer import ShipmentRenderer, status_markup

DEMO_READINGS: dict[str, float] = {
    "Mumbai": 4.2,
    "Pune": 5.1,
    "Delhi": 6.0,
    "Nagpur": 15.0,
}


def demo_cmd(
    delay: float = typer.Option(
        0.3,
        "--delay",
        "-d",
        help="Delay in seconds between events for visual effect.",
    ),
) -> None:
    """Run a complete demo with sample products and shipments."""
    with ColdChainService(
        LedgerSettings(store_path=None),
        store=LedgerStore(),
        oracle=FixedReadingOracle(DEMO_READINGS),
        policy=AllowAllPolicy(),
    ) as service:
        _run_demo(service, delay)


def _run_demo(service: ColdChainService, delay: float) -> None:
    renderer = ShipmentRenderer(console=console)

    console.print()
    console.print(
        Panel(
            "[bold]Cold-Chain Ledger Demo[/bold]\n\n"
            "Registers a vaccine with a 2-8 C band, funds two shipments and\n"
            "reports custody events checked against the temperature oracle.",
            border_style="cyan",
            padding=(1, 2),
        )
    )

    product = service.register_product(
        ProductSpec(
            name="Temperature-Sensitive Medication",
            description="Critical pharmaceutical requiring cold chain maintenance",
            manufacturer="manu-001",
            min_temperature=2.0,
            max_temperature=8.0,
            logistics_partner="logi-001",
        )
    )
    console.print(f"[bold green]Product registered:[/bold green] {product.id}")

    good = service.fund_escrow(product.id, "cons-001", 50000)
    bad = service.fund_escrow(product.id, "cons-001", 25000)
    console.print(f"[bold green]Escrow funded:[/bold green] {good.id}, {bad.id}")

    route = [
        (good.id, "Mumbai", 4.0, EventType.PICKUP),
        (good.id, "Pune", 5.0, EventType.TRANSIT),
        (good.id, "Delhi", 6.0, EventType.DELIVERY),
        (bad.id, "Mumbai", 4.0, EventType.PICKUP),
        (bad.id, "Nagpur", 5.0, EventType.TRANSIT),
    ]
    for shipment_id, location, reported, kind in route:
        time.sleep(delay)
        result = service.add_event(shipment_id, location, reported, kind, "logi-001")
        console.print(
            f"[cyan]>>>[/cyan] {shipment_id} {kind.value:<8} {location:<8} "
            f"reported {reported:.1f} verified {result.event.verified_temperature:.1f} "
            f"-> {status_markup(result.shipment.status)}"
        )

    try:
        service.add_event(bad.id, "Delhi", 6.0, EventType.DELIVERY, "logi-001")
    except InvalidStateError as exc:
        console.print(f"[yellow]Rejected:[/yellow] {exc}")

    confirmed = service.confirm_delivery(good.id)
    console.print(
        f"[bold green]Delivery confirmed[/bold green], escrow released: {confirmed.escrow_released}"
    )
    try:
        service.confirm_delivery(good.id)
    except InvalidStateError as exc:
        console.print(f"[yellow]Second confirmation rejected:[/yellow] {exc}")

    console.print()
    for shipment in service.list_shipments():
        renderer.print_shipment(shipment, chain_valid=service.verify_events(shipment.id))
