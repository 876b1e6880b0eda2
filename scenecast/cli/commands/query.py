"""Read-only content server commands: status, snapshot, exists, download, audit, failed, challenge."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from pathlib import Path
from typing import TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scenecast.client.content_client import ContentClient
from scenecast.client.errors import ContentClientError
from scenecast.client.server import ContentServer
from scenecast.config import config
from scenecast.models.entity import EntityRef, EntityType

console = Console()

T = TypeVar("T")

_SERVER_OPTION = typer.Option(None, "--server", "-s", help="Content server URL.")


def _client(server_url: str | None) -> ContentClient:
    return ContentClient(ContentServer.from_config(config, url=server_url))


def _run(call: Awaitable[T]) -> T:
    """Run one client call, turning client errors into a clean exit."""
    try:
        return asyncio.run(call)
    except ContentClientError as exc:
        console.print(f"[bold red]Request failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)


def status_cmd(server: str = _SERVER_OPTION) -> None:
    """Show content server status."""
    status = _run(_client(server).status())

    table = Table(title="Content Server Status", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field, value in status.model_dump(exclude_none=True).items():
        table.add_row(field, str(value))
    console.print(table)


def snapshot_cmd(server: str = _SERVER_OPTION) -> None:
    """Show the current snapshot index for every entity kind."""
    snapshot = _run(_client(server).snapshot())

    table = Table(title="Snapshot")
    table.add_column("Kind", style="cyan")
    table.add_column("Index hash", style="green")
    table.add_column("Last deployment", justify="right")
    for kind, entry in sorted(snapshot.entities.items()):
        table.add_row(kind, entry.hash, str(entry.last_included_deployment_timestamp))
    console.print(table)


def exists_cmd(
    content_ids: list[str] = typer.Argument(..., help="Content ids to check."),
    server: str = _SERVER_OPTION,
) -> None:
    """Check which content ids the server already stores."""
    statuses = _run(_client(server).content_files_exist(content_ids))
    available = {s.id: s.available for s in statuses}

    table = Table(title="Content availability")
    table.add_column("Content id", style="cyan")
    table.add_column("Available", justify="center")
    for cid in content_ids:
        mark = "[green]Yes[/green]" if available.get(cid) else "[red]No[/red]"
        table.add_row(cid, mark)
    console.print(table)


def download_cmd(
    content_id: str = typer.Argument(..., help="Content id to fetch."),
    destination: Path = typer.Argument(
        None, help="Target file (default: SCENECAST_DOWNLOAD_PATH/<cid>)."
    ),
    server: str = _SERVER_OPTION,
) -> None:
    """Download raw content to a local file."""
    target = destination or config.download_path / content_id
    try:
        written = _run(_client(server).download(content_id, target))
    except OSError as exc:
        console.print(f"[bold red]Cannot write {target}:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    console.print(f"[green]Saved[/green] {content_id} -> {written}")


def audit_cmd(
    kind: EntityType = typer.Argument(..., help="Entity kind."),
    entity_id: str = typer.Argument(..., help="Entity id."),
    server: str = _SERVER_OPTION,
) -> None:
    """Show the audit record for one entity."""
    entity = EntityRef(kind=kind, id=entity_id)
    info = _run(_client(server).entity_information(entity))

    console.print(f"[bold]{entity}[/bold]")
    console.print(f"  version:         {info.version}")
    console.print(f"  local timestamp: {info.local_timestamp}")
    console.print(f"  signer:          {info.signer or '-'}")
    console.print(f"  overwritten by:  {info.overwritten_by or '-'}")
    if info.is_denylisted:
        console.print("  [bold red]denylisted[/bold red]")


def failed_cmd(server: str = _SERVER_OPTION) -> None:
    """List failed deployments."""
    failures = _run(_client(server).failed_deployments())
    if not failures:
        console.print("[dim]No failed deployments.[/dim]")
        return

    table = Table(title="Failed deployments")
    table.add_column("Entity", style="cyan")
    table.add_column("Kind")
    table.add_column("Reason", style="red")
    table.add_column("Description")
    for failure in failures:
        table.add_row(
            failure.entity_id,
            failure.entity_type.value,
            failure.reason,
            failure.error_description,
        )
    console.print(table)


def challenge_cmd(server: str = _SERVER_OPTION) -> None:
    """Print the server's current challenge text."""
    console.print(_run(_client(server).challenge()))
