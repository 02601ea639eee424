"""Cold-chain ledger CLI — Typer-based command-line interface.

Provides the ``coldchain`` command with subcommands for registering
products, funding escrow, reporting custody events, confirming delivery
and inspecting shipments.

All output uses Rich for formatted terminal display.
"""
