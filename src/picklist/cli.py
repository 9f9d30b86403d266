"""CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from picklist.config import Config, ConfigMeta

app = typer.Typer(
    name="picklist",
    help="Pick items from a list in the terminal.",
    add_completion=False,
)
console = Console()
logger = logging.getLogger("picklist.cli")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(log_file: Path | None) -> None:
    """Send picklist logs to a file; the terminal itself stays clean."""
    if log_file is None:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger = logging.getLogger("picklist")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


@app.command()
def main(
    labels: Annotated[
        list[str] | None,
        typer.Argument(help="Item labels (default: Item 1 .. Item 4)"),
    ] = None,
    title: Annotated[
        str | None, typer.Option("--title", "-t", help=ConfigMeta.SETTINGS["title"])
    ] = None,
    poll_interval: Annotated[
        int | None,
        typer.Option("--poll-interval", min=1, help=ConfigMeta.SETTINGS["poll_interval_ms"]),
    ] = None,
    print_: Annotated[
        bool, typer.Option("--print", "-p", help="Print selected labels after quitting")
    ] = False,
    log_file: Annotated[
        Path | None, typer.Option("--log-file", help="Write debug logs to this file")
    ] = None,
):
    """Show the list. Up/Down/Tab move, Enter/Space toggle, q/Esc/Ctrl+C quit."""
    from picklist.ui.selectable_menu import show_menu
    from picklist.ui.terminal import TerminalError

    _configure_logging(log_file)
    cfg = Config.load(title=title, poll_interval_ms=poll_interval)

    try:
        selected = show_menu(labels or cfg.default_labels, config=cfg)
    except TerminalError as e:
        logger.error("session failed: %s", e)
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    logger.debug("selected %d item(s)", len(selected))
    if print_:
        for label in selected:
            console.print(label, markup=False, highlight=False)
