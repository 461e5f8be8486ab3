import typer
from rich.console import Console

from .. import config

app = typer.Typer()
console = Console()


@app.command("set-url")
def set_url(url: str):
    """
    point noderesolve at a different node distribution server.

    the server must publish an index.json in the same format as nodejs.org/dist.
    """
    try:
        config.set_index_base(url, config.CONFIG_FILE)
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Distribution server set to {url}[/green]")


@app.command("show")
def show():
    """show the distribution server in use."""
    override = config.get_configured_base(config.CONFIG_FILE)
    if override:
        console.print(f"Distribution server: [bold]{override}[/bold] (from {config.CONFIG_FILE})", soft_wrap=True)
    else:
        console.print(f"Distribution server: [bold]{config.DEFAULT_INDEX_BASE}[/bold] (default)")
    console.print(f"Cache directory: {config.CACHE_DIR}", soft_wrap=True)
