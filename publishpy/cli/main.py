"""publishpy CLI - Main commands."""
import asyncio
import logging
from http import HTTPStatus
from pathlib import Path
from typing import List, Optional

import aiohttp
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from publishpy import setup_logging
from publishpy.client import PublishClient
from publishpy.core.api import PublishConfig
from publishpy.core.exceptions import PublishError
from publishpy.core.upload import PackageMeta, PublishState, RichProgressRenderer, UploadSession
from publishpy.core.utils import bytes_to_size

app = typer.Typer(
    name="publishpy",
    help="Publish packages to a package registry",
    add_completion=False
)
console = Console()

DEFAULT_REPOSITORY = PublishConfig.repository


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)]
    )
    setup_logging(logging.DEBUG)


def build_config(repository: str, auth_type: str, insecure: bool) -> PublishConfig:
    return PublishClient.create_config(
        repository=repository,
        auth_type=auth_type,
        verify_ssl=not insecure
    )


def print_error(error: Exception) -> None:
    """Print a failed publish attempt with the server's details."""
    if isinstance(error, PublishError):
        console.print(f"[red]ERROR: {escape(error.message)}[/red]")
        if error.status is not None:
            try:
                phrase = HTTPStatus(error.status).phrase
            except ValueError:
                phrase = ""
            console.print("[red]Details:[/red]")
            console.print(f"Status code: {error.status} {phrase}".rstrip())
        if error.body:
            console.print(f"[dim]{escape(error.body)}[/dim]")
    else:
        console.print(f"[red]ERROR: {escape(str(error)) or type(error).__name__}[/red]")
    console.print("[red]Exiting[/red]")


def make_client(
    token: Optional[str],
    config: PublishConfig
) -> PublishClient:
    """Create a client that reports upload progress on the console."""
    def on_state(state: PublishState, session: Optional[UploadSession]):
        if state == PublishState.UPLOADING and session is not None:
            console.print(
                f"[cyan]Uploading {escape(session.filename)} ({bytes_to_size(session.size)}) "
                f"in {len(session.parts)} chunks...[/cyan]"
            )

    return PublishClient(
        token=token or "",
        config=config,
        renderer=RichProgressRenderer(console=console, description="chunks uploaded"),
        state_callback=on_state
    )


@app.command()
def publish(
    file_path: Path = typer.Argument(..., help="Packaged artifact to publish"),
    namespace: str = typer.Option(..., "--namespace", "-n", help="Package namespace (author/team)"),
    name: str = typer.Option(..., "--name", help="Package name"),
    version: str = typer.Option(None, "--version", help="Package version (display only)"),
    categories: Optional[List[str]] = typer.Option(None, "--category", "-c", help="Category tag (repeatable)"),
    communities: Optional[List[str]] = typer.Option(None, "--community", help="Target community (repeatable)"),
    nsfw: bool = typer.Option(False, "--nsfw", help="Package contains NSFW content"),
    repository: str = typer.Option(DEFAULT_REPOSITORY, "--repository", "-r", envvar="PUBLISHPY_REPOSITORY", help="Registry base URL"),
    token: str = typer.Option(None, "--token", envvar="PUBLISHPY_TOKEN", help="Registry auth token"),
    auth_type: str = typer.Option("Bearer", "--auth-type", help="Authorization scheme"),
    insecure: bool = typer.Option(False, "--insecure", help="Disable SSL verification"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Upload a packaged artifact and publish it."""
    configure_logging(verbose)
    package = PackageMeta(
        namespace=namespace,
        name=name,
        version=version,
        categories=categories or [],
        communities=communities or [],
        has_nsfw_content=nsfw
    )
    config = build_config(repository, auth_type, insecure)

    async def do_publish():
        console.print()
        console.print(f"Publishing [cyan]{escape(str(file_path))}[/cyan]")
        console.print()

        async with make_client(token, config) as client:
            return await client.publish(file_path, package)

    try:
        result = run_async(do_publish())
    except (PublishError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(f"[blue]Successfully published {escape(result.package)}[/blue]")
    console.print(f"Upload: {result.media_uuid}")


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="File to upload"),
    repository: str = typer.Option(DEFAULT_REPOSITORY, "--repository", "-r", envvar="PUBLISHPY_REPOSITORY", help="Registry base URL"),
    token: str = typer.Option(None, "--token", envvar="PUBLISHPY_TOKEN", help="Registry auth token"),
    auth_type: str = typer.Option("Bearer", "--auth-type", help="Authorization scheme"),
    insecure: bool = typer.Option(False, "--insecure", help="Disable SSL verification"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Upload a file as user media without publishing it."""
    configure_logging(verbose)
    config = build_config(repository, auth_type, insecure)

    async def do_upload():
        async with make_client(token, config) as client:
            return await client.upload_media(file_path)

    try:
        media = run_async(do_upload())
    except (PublishError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(f"[green]Uploaded:[/green] {escape(media.filename)}")
    console.print(f"UUID: {media.uuid}")
    console.print(f"Size: {media.size:,} bytes")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
