"""``scenecast prepare`` and ``scenecast submit`` — the two halves of a deployment.

``prepare`` builds the manifest and writes a bundle; the printed entity id
is what the deployer's wallet signs.  ``submit`` takes the bundle plus the
resulting auth chain and sends it.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from scenecast.client.content_client import ContentClient
from scenecast.client.errors import ContentClientError
from scenecast.client.server import ContentServer
from scenecast.config import config
from scenecast.core.auth_chain import MissingAuthenticationError
from scenecast.core.bundle import read_bundle, read_source_files, write_bundle
from scenecast.core.conflicts import InvalidPointersError
from scenecast.core.deployer import MissingSceneEntityError, SceneDeployer
from scenecast.core.manifest_builder import ManifestBuilder
from scenecast.models.auth import AuthChain
from scenecast.models.entity import ManifestFormatError, Parcel

console = Console()


def _deployer(server_url: str | None) -> SceneDeployer:
    client = ContentClient(ContentServer.from_config(config, url=server_url))
    builder = ManifestBuilder(
        config.transient_prefixes, schema_version=config.schema_version
    )
    return SceneDeployer(client, builder=builder)


def prepare_cmd(
    source: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        help="Directory holding the scene's local files.",
    ),
    pointers: list[str] = typer.Option(
        ...,
        "--pointer",
        "-p",
        help="Parcel to claim, as 'x,y'. Repeat for each parcel.",
    ),
    out: Path = typer.Option(
        None,
        "--out",
        "-o",
        help="Bundle directory (default: SCENECAST_BUNDLE_PATH).",
    ),
    server: str = typer.Option(None, "--server", "-s", help="Content server URL."),
) -> None:
    """Build a manifest from SOURCE and write a deployment bundle."""
    bundle_dir = out or config.bundle_path
    try:
        normalized = [str(Parcel.parse(p)) for p in pointers]
    except ValueError as exc:
        console.print(f"[bold red]Invalid pointer:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    local_files = read_source_files(source, exclude=bundle_dir)
    deployer = _deployer(server)

    try:
        files, entity_id = asyncio.run(deployer.prepare(normalized, local_files))
    except ContentClientError as exc:
        console.print(f"[bold red]Could not read current state:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    write_bundle(bundle_dir, entity_id, files)

    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Deployment prepared![/bold green]",
                "",
                f"[bold]Entity ID:[/bold]  {entity_id}",
                f"[bold]Pointers:[/bold]   {' '.join(normalized)}",
                f"[bold]Files:[/bold]      {len(local_files)}",
                f"[bold]Bundle:[/bold]     {bundle_dir}",
                "",
                "[dim]Sign the entity ID, then run 'scenecast submit'.[/dim]",
            ]),
            title="[bold]scenecast[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()

    # Print the entity id plainly for scripting
    console.print(f"[bold]{entity_id}[/bold]")


def submit_cmd(
    bundle: Path = typer.Argument(
        None,
        help="Bundle directory written by 'prepare' (default: SCENECAST_BUNDLE_PATH).",
    ),
    auth_chain_file: Path = typer.Option(
        ...,
        "--auth-chain",
        "-a",
        exists=True,
        dir_okay=False,
        help="JSON array of {type, payload, signature} links.",
    ),
    server: str = typer.Option(None, "--server", "-s", help="Content server URL."),
) -> None:
    """Validate pointers and submit a prepared bundle."""
    bundle_dir = bundle or config.bundle_path
    try:
        entity_id, files = read_bundle(bundle_dir)
    except (OSError, KeyError, ValueError) as exc:
        console.print(f"[bold red]Cannot read bundle {bundle_dir}:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    try:
        chain = AuthChain.from_json(auth_chain_file.read_bytes())
    except ValueError as exc:
        console.print(f"[bold red]Invalid auth chain:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    deployer = _deployer(server)
    try:
        response = asyncio.run(deployer.deploy(entity_id, files, chain))
    except InvalidPointersError as exc:
        console.print("[bold red]Pointer conflict.[/bold red]")
        console.print(f"  [red]found:[/red]    {' '.join(exc.found)}")
        console.print(f"  [red]expected:[/red] {' '.join(exc.expected)}")
        raise typer.Exit(code=1)
    except (
        MissingSceneEntityError,
        MissingAuthenticationError,
        ManifestFormatError,
        ContentClientError,
    ) as exc:
        console.print(f"[bold red]Deployment failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(
        f"[bold green]Deployed[/bold green] {entity_id} "
        f"at {response.creation_timestamp}"
    )
