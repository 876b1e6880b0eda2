"""scenecast CLI — Typer-based command-line interface.

Provides the ``scenecast`` command with subcommands for preparing and
submitting deployments and for querying content server state.

All output uses Rich for formatted terminal display.
"""
