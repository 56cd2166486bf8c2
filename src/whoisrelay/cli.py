#!/usr/bin/env python3
"""
Command-line interface for the WHOIS relay.
"""

import asyncio
import json
import sys

import click
import structlog

from whoisrelay.config import Config
from whoisrelay.errors import InvalidQueryError
from whoisrelay.logging_setup import configure_logging
from whoisrelay.services.concurrent_service import ConcurrentLookupService
from whoisrelay.services.server_resolver import ServerResolver, ServerTable
from whoisrelay.services.whois_service import WhoisService
from whoisrelay.utils.validators import classify, ensure_valid_query

logger = structlog.get_logger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """WhoisRelay CLI tool."""
    ctx.ensure_object(dict)

    config = Config.from_env()
    if verbose:
        config.log_level = "DEBUG"
    try:
        config.validate()
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    configure_logging(config.log_level)

    ctx.obj["config"] = config


def _validated(target: str) -> str:
    try:
        return ensure_valid_query(target)
    except InvalidQueryError:
        click.echo(
            f"Error: Invalid target '{target}'. Must be a domain or IP address.",
            err=True,
        )
        sys.exit(1)


@cli.command()
@click.argument("target")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format",
)
@click.pass_context
def whois(ctx: click.Context, target: str, output: str) -> None:
    """Perform Whois lookup for domain or IP address."""
    query = _validated(target)

    async def run_whois() -> None:
        service = WhoisService(ctx.obj["config"])
        result = await service.lookup(query)

        if output == "json":
            click.echo(json.dumps(result.model_dump(), indent=2))
        else:
            click.echo(f"Target: {result.query}")
            click.echo(f"Type: {classify(result.query)}")
            click.echo(f"Server: {result.server}")
            click.echo("-" * 40)
            click.echo(result.result or "(no response)")

    asyncio.run(run_whois())


@cli.command()
@click.argument("target")
@click.pass_context
def resolve(ctx: click.Context, target: str) -> None:
    """Show which WHOIS server would be asked first (no network I/O)."""
    query = _validated(target)
    resolver = ServerResolver(ServerTable.from_config(ctx.obj["config"]))
    click.echo(resolver.resolve(query))


@cli.command("config")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    config = ctx.obj["config"]

    click.echo("Current Configuration:")
    click.echo("=" * 40)

    for key, value in config.to_dict().items():
        click.echo(f"{key}: {value}")


@cli.command("http-server")
@click.option("--host", default=None, help="HTTP server host (default: from config or 0.0.0.0)")
@click.option("--port", default=None, type=int, help="HTTP server port (default: from config or 8000)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_context
def http_server(ctx: click.Context, host: str, port: int, reload: bool) -> None:
    """Run the HTTP relay server."""
    import uvicorn

    config = ctx.obj["config"]

    host = host or config.http_host
    port = port or config.http_port

    click.echo(f"Starting HTTP relay on {host}:{port}")
    click.echo("Press Ctrl+C to stop")

    try:
        uvicorn.run(
            "whoisrelay.http_server:app",
            host=host,
            port=port,
            reload=reload,
            log_level=config.log_level.lower(),
        )
    except KeyboardInterrupt:
        click.echo("\nServer stopped")


@cli.command("bulk-lookup")
@click.argument("targets", nargs=-1, required=True)
@click.option("--max-concurrent", default=10, type=int, help="Maximum concurrent lookups")
@click.option("--output", "-o", type=click.Choice(["json", "text"]), default="text", help="Output format")
@click.pass_context
def bulk_lookup(ctx: click.Context, targets: tuple, max_concurrent: int, output: str) -> None:
    """Perform bulk lookups for multiple domains/IPs."""

    async def run_bulk() -> None:
        service = ConcurrentLookupService(ctx.obj["config"])

        target_list = list(targets)
        if output == "text":
            click.echo(f"Starting bulk lookup for {len(target_list)} targets...")

        results = []
        async for item in service.bulk_lookup(targets=target_list, max_concurrent=max_concurrent):
            results.append(item)

            if output == "text":
                if item.status == "success" and item.data:
                    click.echo(f"✓ {item.target} ({item.data.server})")
                else:
                    click.echo(f"✗ {item.target}: {item.error}")

        if output == "json":
            click.echo(json.dumps([r.model_dump() for r in results], indent=2))
        else:
            stats = service.get_statistics()
            click.echo(f"\nCompleted {len(results)} lookups")
            click.echo(f"Success rate: {stats['success_rate']:.1%}")

    asyncio.run(run_bulk())


def main() -> None:
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
