"""evolvechain CLI: Typer-based command-line interface.

Provides the ``evolvechain`` command with subcommands for generating a
chain, running an offline demo, and walking a locally published history.

All output uses Rich for formatted terminal display.
"""
