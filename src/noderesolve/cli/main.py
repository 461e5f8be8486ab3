import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .. import config
from ..domain.errors import NodeResolveError
from ..domain.models import VersionSpec
from ..registry.cache import IndexCache
from ..registry.index import IndexProvider
from ..resolution.resolver import NodeResolver
from ..ui.progress import ProgressManager
from .config_commands import app as config_app

app = typer.Typer()
console = Console()

# add config subcommand
app.add_typer(config_app, name="config", help="Manage the distribution server setting")


def get_provider() -> IndexProvider:
    progress_manager = ProgressManager()
    return IndexProvider(config.CACHE_DIR, progress_manager=progress_manager)


def get_resolver(provider: IndexProvider) -> NodeResolver:
    return NodeResolver(provider, config.get_index_base(config.CONFIG_FILE))


@app.callback()
def main_callback(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """resolve node versions against the public version index."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@app.command()
def resolve(
    spec: str = typer.Argument(..., help="'latest', 'lts', a semver range or an exact version"),
    url: Optional[str] = typer.Option(None, "--url", help="Distribution server base url"),
):
    """
    resolve a version specifier to a concrete node version.
    """
    try:
        version_spec = VersionSpec.parse(spec)
        with get_provider() as provider:
            version = get_resolver(provider).resolve(version_spec, url)
    except NodeResolveError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    console.print(str(version), highlight=False, soft_wrap=True)


@app.command("list")
def list_versions(
    lts: bool = typer.Option(False, "--lts", help="Only show LTS releases"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum number of versions to show"),
    url: Optional[str] = typer.Option(None, "--url", help="Distribution server base url"),
):
    """
    show the newest versions available on the distribution server.
    """
    index_url = config.index_url(url or config.get_index_base(config.CONFIG_FILE))
    try:
        with get_provider() as provider:
            index = provider.get_catalog(index_url)
    except NodeResolveError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    entries = [e for e in index.entries if e.lts or not lts][:limit]
    if not entries:
        console.print("[yellow]No versions found.[/yellow]")
        return

    table = Table(title=f"Node versions from {index_url}")
    table.add_column("Version", style="bold cyan")
    table.add_column("npm")
    table.add_column("LTS", justify="center")
    for entry in entries:
        table.add_row(str(entry.version), str(entry.npm), "✓" if entry.lts else "")
    console.print(table)


@app.command()
def cache(
    action: str = typer.Argument(..., help="Action to perform: 'path'"),
    url: Optional[str] = typer.Option(None, "--url", help="Distribution server base url"),
):
    """
    inspect the local index cache.

    actions:
      path - show where the index for the distribution server is cached
    """
    if action != "path":
        console.print(f"[red]Invalid action '{action}'. Use 'path'.[/red]")
        raise typer.Exit(code=1)

    base = url or config.get_index_base(config.CONFIG_FILE)
    slot = IndexCache.for_url(config.CACHE_DIR, config.index_url(base))
    console.print(f"Index:  {slot.index_file}", highlight=False, soft_wrap=True)
    console.print(f"Expiry: {slot.expiry_file}", highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
