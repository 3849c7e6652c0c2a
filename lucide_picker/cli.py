#!/usr/bin/env python3
"""lucide-picker - search Lucide icons and render standalone SVG markup."""

import asyncio
import math
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from lucide_picker.catalog import IconCatalog
from lucide_picker.errors import InvalidIdentifier
from lucide_picker.markup import require_icon_name
from lucide_picker.sprite import SpriteLoader
from lucide_picker.storage import StorageManager

# Config setting descriptions
CONFIG_DESCRIPTIONS = {
    "catalog_path": "Icon catalog JSON (name -> tags). null = bundled catalog",
    "sprite_url": "Symbol sprite URL or path. null = bundled sprite",
    "cdn_url": "Base URL for standalone <name>.svg files",
    "fetch_timeout": "Seconds before an asset fetch gives up",
    "cache_ttl": "Seconds a fetched icon stays cached (default one week)",
    "failure_ttl": "Seconds a failed fetch is remembered (0 = never)",
    "cache_backend": "Markup cache: file (durable) or memory (per process)",
    "page_size": "Icons rendered per picker page",
    "search_delay": "Search debounce in seconds",
    "scroll_delay": "Scroll check debounce in seconds",
    "server_port": "Port for `lucide-picker serve` (localhost)",
}

app = typer.Typer(
    name="lucide-picker",
    help="Search Lucide icons and render standalone SVG markup",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()


# Rich formatting helpers
def info(text: str) -> str:
    return f"[cyan]{text}[/cyan]"


def error(text: str) -> str:
    return f"[red]{text}[/red]"


def success(text: str) -> str:
    return f"[green]{text}[/green]"


def warning(text: str) -> str:
    return f"[yellow]{text}[/yellow]"


def _load_catalog(storage: StorageManager) -> IconCatalog:
    return IconCatalog.from_source(storage.get_catalog_source())


@app.command("search")
def search_cmd(
    query: str = typer.Argument("", help="Text to match against icon names and tags"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Zero-based result page"),
) -> None:
    """Search the icon catalog the same way the picker does."""
    storage = StorageManager()
    catalog = _load_catalog(storage)
    names = catalog.search(query)

    if not names:
        console.print(warning("No icons found"))
        return

    page_size = storage.load_config().page_size
    pages = math.ceil(len(names) / page_size)
    start = page * page_size
    window = names[start:start + page_size]
    if not window:
        console.print(warning(f"Page {page} is past the last page ({pages - 1})"))
        raise typer.Exit(1)

    table = Table(title=f"Icons matching '{query}'" if query.strip() else "All icons")
    table.add_column("Name", style="cyan")
    table.add_column("Tags", style="dim")
    for name in window:
        table.add_row(name, ", ".join(catalog.tags(name)))

    console.print(table)
    console.print(f"[dim]{len(names)} matches, page {page + 1} of {pages}[/dim]")


@app.command("render")
def render_cmd(
    name: str = typer.Argument(..., help="Icon name (e.g. rocket)"),
    class_name: str = typer.Option("", "--class", "-c", help="CSS classes for the <svg>"),
    width: int = typer.Option(24, "--width", "-w", help="Width attribute"),
    height: int = typer.Option(24, "--height", "-H", help="Height attribute"),
    stroke: str = typer.Option("currentColor", "--stroke", "-s", help="Stroke color"),
    raw: bool = typer.Option(False, "--raw", "-r", help="Print bare markup (for piping)"),
) -> None:
    """Render standalone SVG markup for one icon."""
    try:
        require_icon_name(name)
    except InvalidIdentifier as e:
        console.print(error(escape(str(e))))
        raise typer.Exit(1)

    storage = StorageManager()
    resolver = storage.build_resolver()
    svg = asyncio.run(
        resolver.resolve(name, class_name=class_name, width=width, height=height, stroke=stroke)
    )

    if not svg:
        console.print(error(f"Could not resolve icon '{name}'"))
        raise typer.Exit(1)

    if raw:
        typer.echo(svg)
        return
    console.print(Panel(
        Syntax(svg, "xml", theme="monokai", word_wrap=True),
        title=info(name),
        border_style="cyan",
    ))


@app.command("serve")
def serve_cmd(
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on (default from config)"),
) -> None:
    """Serve the catalog, sprite and icon markup over HTTP."""
    from lucide_picker.server import IconServer

    storage = StorageManager()
    config = storage.load_config()
    server = IconServer(
        catalog=_load_catalog(storage),
        resolver=storage.build_resolver(),
        sprite_loader=SpriteLoader(
            location=storage.get_sprite_location(),
            timeout=config.fetch_timeout,
        ),
        page_size=config.page_size,
    )

    async def run() -> None:
        actual_port = await server.start(port or config.server_port)
        console.print(success(f"Serving {len(server.catalog)} icons on http://localhost:{actual_port}"))
        console.print("[dim]Press Ctrl+C to stop[/dim]")
        try:
            await asyncio.Event().wait()
        finally:
            await server.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped[/dim]")


@app.command("config")
def config_cmd(
    reset: bool = typer.Option(False, "--reset", help="Reset configuration to defaults"),
) -> None:
    """Show (or reset) the configuration."""
    storage = StorageManager()

    if reset:
        if not typer.confirm("Reset configuration to defaults?"):
            console.print("[dim]Cancelled[/dim]")
            return
        storage.reset_config()
        console.print(success("Configuration reset"))

    config = storage.load_config()
    table = Table(title=f"Configuration ({storage.config_path})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Description", style="dim")
    for key, value in config.to_dict().items():
        table.add_row(key, "null" if value is None else str(value), CONFIG_DESCRIPTIONS.get(key, ""))
    console.print(table)


@app.command("cache")
def cache_cmd(
    clear: bool = typer.Option(False, "--clear", help="Delete every cached icon"),
) -> None:
    """Inspect or clear the markup cache."""
    storage = StorageManager()
    config = storage.load_config()

    if config.cache_backend == "memory":
        console.print(info("Memory cache in use; nothing is stored on disk"))
        return

    if clear:
        removed = storage.build_cache().clear()
        console.print(success(f"Removed {removed} cached icon(s)"))
        return

    count = len(list(storage.cache_dir.glob("*.json"))) if storage.cache_dir.exists() else 0
    console.print(f"{count} cached icon(s) in {storage.cache_dir}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
