#!/usr/bin/env python3
"""
Operator CLI for the order gateway.

    polymarket-gateway serve --port 3000
    polymarket-gateway derive-creds
    polymarket-gateway check-config
"""
from __future__ import annotations

from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from config import get_config, validate_config
from execution import polymarket_client
from execution.credentials import DefaultCredentials, short_address
from execution.errors import ConfigurationError
from server import configure_logging

app = typer.Typer(help="Polymarket Order Gateway", no_args_is_help=True)
console = Console()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default BIND_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Listen port (default PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Run the HTTP gateway under uvicorn."""
    cfg = get_config()
    configure_logging(cfg.server.log_level)
    bind, listen = host or cfg.server.bind_host, port or cfg.server.port
    console.print(f"[bold cyan]🚀 Gateway on http://{bind}:{listen}[/bold cyan]")
    console.print(f"📡 Health check: http://{bind}:{listen}/health")
    console.print(f"📝 Orders endpoint: http://{bind}:{listen}/api/orders")
    uvicorn.run("server:create_app", factory=True, host=bind, port=listen,
                reload=reload, log_config=None)


@app.command("derive-creds")
def derive_creds():
    """Derive CLOB API credentials for the default signer and print them."""
    cfg = get_config()
    try:
        pair = DefaultCredentials().resolve(cfg.signer)
    except ConfigurationError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(1)

    client = polymarket_client.build_clob_client(cfg.venue, pair.signing_key)
    try:
        creds = polymarket_client.derive_api_creds(client)
    except Exception as e:
        console.print(f"[red]✗ Failed to create API key: {polymarket_client.upstream_message(e)}[/red]")
        raise typer.Exit(1)
    if not creds:
        console.print("[red]✗ API key creation returned no credentials[/red]")
        raise typer.Exit(1)

    table = Table(title=f"API credentials for {short_address(pair.funder_address)}",
                  show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("api_key", creds.api_key)
    table.add_row("api_secret", creds.api_secret)
    table.add_row("api_passphrase", creds.api_passphrase)
    console.print(table)


@app.command("check-config")
def check_config():
    """Validate environment configuration."""
    cfg = get_config()
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("HOST", cfg.venue.host)
    table.add_row("CHAIN_ID", str(cfg.venue.chain_id))
    table.add_row("SIGNATURE_TYPE", str(cfg.venue.signature_type))
    table.add_row("FUNDER_ADDRESS", short_address(cfg.signer.funder_address) or "-")
    table.add_row("PRIVATE_KEY", "set" if cfg.signer.private_key else "-")
    table.add_row("PORT", str(cfg.server.port))
    console.print(table)

    problems = validate_config(cfg)
    for problem in problems:
        console.print(f"[yellow]⚠ {problem}[/yellow]")
    if not problems:
        console.print("[green]✓ Configuration OK[/green]")
    raise typer.Exit(1 if problems else 0)


if __name__ == "__main__":
    app()
