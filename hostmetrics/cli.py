import asyncio
import time

import typer
from rich.console import Console
from rich.table import Table

from hostmetrics.core.exceptions import ProviderUnavailableError

console = Console()
cli_app = typer.Typer(name="hostmetrics", help="Host metrics reporter")


def _run_async(coro):
    """Run async code from sync CLI context."""
    return asyncio.run(coro)


def _format_bytes(size: int) -> str:
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:.1f}{unit}" if unit != "B" else f"{size}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


@cli_app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Listen address (default from HOSTMETRICS_HOST)"),
    port: int = typer.Option(None, "--port", help="Listen port (default from HOSTMETRICS_PORT)"),
):
    """Run the HTTP server."""
    from hostmetrics.main import run

    run(host=host, port=port)


@cli_app.command("cpu")
def cpu(
    interval: float = typer.Option(1.0, "--interval", help="Seconds to sample usage over"),
):
    """Print uptime and per-core CPU usage."""
    from hostmetrics.main import build_snapshot_cache

    cache = build_snapshot_cache()
    # Usage is measured since the provider was created
    time.sleep(max(0.0, interval))
    try:
        snapshot = _run_async(cache.get_cpu_snapshot())
    except ProviderUnavailableError as e:
        console.print(f"[bold red]{e.message}[/bold red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Uptime: {snapshot.uptime_seconds}s")
    table.add_column("Core", justify="right")
    table.add_column("Usage %", justify="right")
    for index, usage in enumerate(snapshot.per_core_usage):
        table.add_row(str(index), f"{usage:5.1f}")
    console.print(table)


@cli_app.command("disks")
def disks():
    """Print total and available space per mounted disk."""
    from hostmetrics.main import build_snapshot_cache

    cache = build_snapshot_cache()
    try:
        snapshot = _run_async(cache.get_disk_snapshot())
    except ProviderUnavailableError as e:
        console.print(f"[bold red]{e.message}[/bold red]")
        raise typer.Exit(code=1)

    if not snapshot:
        console.print("[dim]No disks found.[/dim]")
        return

    table = Table(title="Disks")
    table.add_column("Name")
    table.add_column("Mount point")
    table.add_column("Total", justify="right")
    table.add_column("Available", justify="right")
    for record in snapshot:
        table.add_row(
            record.name,
            record.mount_point,
            _format_bytes(record.total_space_bytes),
            _format_bytes(record.available_space_bytes),
        )
    console.print(table)


def main():
    cli_app()


if __name__ == "__main__":
    main()
