"""``coldchain weather`` — look up the verified temperature for a place."""

from __future__ import annotations

import typer
from rich.table import Table

from coldchain.cli.commands._common import console, open_service
from coldchain.models.oracle import ReadingSource


def weather_cmd(
    location: str = typer.Argument(..., help="City or checkpoint name."),
) -> None:
    """Show the reading add-event would use for LOCATION.

    Falls back to the fixed estimate when the oracle is unreachable, exactly
    as event verification does.
    """
    with open_service(None, persistent=False) as service:
        reading = service.get_temperature(location)

    table = Table(title=f"Temperature: {reading.location}", header_style="bold cyan", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Temperature", f"{reading.temperature:.1f} C")
    table.add_row("Humidity", "-" if reading.humidity is None else f"{reading.humidity:g}%")
    table.add_row("Conditions", reading.conditions or "-")
    source_style = "green" if reading.source == ReadingSource.ORACLE else "yellow"
    table.add_row("Source", f"[{source_style}]{reading.source.value}[/{source_style}]")
    console.print(table)
