"""
CLI for jieba-native.

Provides the `jieba-native` command: inspect the platform mapping, install
the native artifact ahead of time, and run the chat command locally.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn
from rich.progress import DownloadColumn
from rich.progress import Progress
from rich.progress import TextColumn
from rich.progress import TransferSpeedColumn

from . import __version__
from .commands import DEFAULT_NUMBER
from .commands import NO_MESSAGE
from .commands import Action
from .commands import render_reply
from .config import load_config
from .exceptions import JiebaNativeError
from .platforms import detect_platform
from .platforms import resolve
from .service import FAILURE_MESSAGES
from .service import JiebaService

console = Console()


async def _start_service(base_dir: Path, config_path: Path | None, show_progress: bool) -> JiebaService:
    config = load_config(config_path)
    if not show_progress:
        service = JiebaService(config, base_dir)
        await service.start()
        return service

    with Progress(
        TextColumn("[bold blue]Downloading jieba"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("download", total=None)

        def on_progress(received: int, total: int | None) -> None:
            progress.update(task, completed=received, total=total)

        service = JiebaService(config, base_dir, on_progress=on_progress)
        await service.start()
    return service


def _run_service(base_dir: Path, config_path: Path | None, show_progress: bool = True) -> JiebaService:
    try:
        return asyncio.run(_start_service(base_dir, config_path, show_progress))
    except JiebaNativeError as e:
        console.print(f"[red]✗ {FAILURE_MESSAGES[e.kind]}[/red]")
        console.print(f"[dim]{e}[/dim]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="jieba-native")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Base directory the install directory is resolved against",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML configuration file",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, base_dir: Path, config_path: Path | None) -> None:
    """Jieba segmentation backed by a prebuilt native binary."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = {"base_dir": base_dir, "config_path": config_path}


@cli.command()
def platform() -> None:
    """Show the detected platform and the artifact it maps to."""
    key = detect_platform()
    console.print(f"Platform: [cyan]{key.os}[/cyan] / [cyan]{key.arch}[/cyan]")
    try:
        artifact_id = resolve(key.os, key.arch)
    except JiebaNativeError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    console.print(f"Artifact: [green]{artifact_id}[/green]")


@cli.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """Download and load the native artifact without running a command."""
    service = _run_service(ctx.obj["base_dir"], ctx.obj["config_path"])
    console.print(f"[green]✓[/green] {service.artifact_id} ready in {service.install_dir}")


@cli.command()
@click.argument("message", required=False)
@click.option("--action", "-a", type=click.IntRange(min=0), default=Action.CUT.value, help="Action id")
@click.option("-c", "cut_all", is_flag=True, help="Full segmentation (action 1)")
@click.option("-e", "extract", is_flag=True, help="Keyword extraction (action 2)")
@click.option("--number", "-n", type=click.IntRange(min=1), default=DEFAULT_NUMBER, show_default=True)
@click.pass_context
def cut(
    ctx: click.Context,
    message: str | None,
    action: int,
    cut_all: bool,
    extract: bool,
    number: int,
) -> None:
    """Segment MESSAGE the way the chat command does.

    Examples:

        jieba-native cut 我来到北京清华大学

        jieba-native cut -e -n 5 我来到北京清华大学
    """
    if not message:
        click.echo(NO_MESSAGE)
        return
    if cut_all:
        action = Action.CUT_ALL
    if extract:
        action = Action.EXTRACT
    service = _run_service(ctx.obj["base_dir"], ctx.obj["config_path"], show_progress=False)
    click.echo(render_reply(service, message, action, number))


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
