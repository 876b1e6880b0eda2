"""Main Typer application — imports and registers all CLI commands.

Entry point: ``scenecast`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from scenecast.cli.commands.deploy import prepare_cmd, submit_cmd
from scenecast.cli.commands.query import (
    audit_cmd,
    challenge_cmd,
    download_cmd,
    exists_cmd,
    failed_cmd,
    snapshot_cmd,
    status_cmd,
)
from scenecast.config import config

app = typer.Typer(
    name="scenecast",
    help="scenecast: publish content-addressed scenes to content servers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def _configure(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (default: SCENECAST_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging once for every subcommand."""
    level = (log_level or config.log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=config.debug, show_path=config.debug)],
    )


# Register subcommands
app.command(name="prepare", help="Build a manifest and write a deployment bundle.")(prepare_cmd)
app.command(name="submit", help="Submit a signed deployment bundle.")(submit_cmd)
app.command(name="status", help="Show content server status.")(status_cmd)
app.command(name="snapshot", help="Show the server's snapshot index.")(snapshot_cmd)
app.command(name="exists", help="Check content availability.")(exists_cmd)
app.command(name="download", help="Download content by id.")(download_cmd)
app.command(name="audit", help="Show an entity's audit record.")(audit_cmd)
app.command(name="failed", help="List failed deployments.")(failed_cmd)
app.command(name="challenge", help="Print the server challenge text.")(challenge_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
